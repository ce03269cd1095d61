"""App user domain exceptions."""

from src.core.domain.exceptions import DuplicateEntityError, EntityNotFoundError


class AppUserNotFoundError(EntityNotFoundError):
    def __init__(self, user_id: str | None = None) -> None:
        super().__init__("AppUser", user_id)


class AppUserConflictError(DuplicateEntityError):
    """Username or email already taken within the application."""

    error_code = "APP_USER_CONFLICT"

    def __init__(self, field: str, value: str) -> None:
        self.field = field
        super().__init__("AppUser", field, value)


class SessionTokenConflictError(DuplicateEntityError):
    error_code = "SESSION_TOKEN_CONFLICT"

    def __init__(self, session_token: str) -> None:
        super().__init__("ActiveSession", "session_token", session_token)
