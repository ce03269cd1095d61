"""Blacklist domain exceptions."""

from src.core.domain.exceptions import AuthorizationError, EntityNotFoundError


class BlacklistEntryNotFoundError(EntityNotFoundError):
    def __init__(self, entry_id: str | None = None) -> None:
        super().__init__("BlacklistEntry", entry_id)


class BlacklistAccessDeniedError(AuthorizationError):
    error_code = "BLACKLIST_ACCESS_DENIED"

    def __init__(self) -> None:
        super().__init__("Access denied")
