"""Application domain exceptions."""

from src.core.domain.exceptions import AuthorizationError, EntityNotFoundError


class ApplicationNotFoundError(EntityNotFoundError):
    """Raised when an application is not found."""

    def __init__(self, application_id: str | None = None) -> None:
        super().__init__("Application", application_id)


class ApplicationAccessDeniedError(AuthorizationError):
    """Raised when an owner touches another owner's application."""

    error_code = "APPLICATION_ACCESS_DENIED"

    def __init__(self) -> None:
        super().__init__("You do not own this application")
