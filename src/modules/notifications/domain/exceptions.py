"""Notification domain exceptions."""

from fastapi import status

from src.core.domain.exceptions import (
    AuthorizationError,
    DomainException,
    EntityNotFoundError,
    ValidationError,
)


class WebhookNotFoundError(EntityNotFoundError):
    def __init__(self, webhook_id: str | None = None) -> None:
        super().__init__("Webhook", webhook_id)


class WebhookAccessDeniedError(AuthorizationError):
    error_code = "WEBHOOK_ACCESS_DENIED"

    def __init__(self) -> None:
        super().__init__("Access denied")


class InvalidWebhookError(ValidationError):
    """Malformed URL or unknown event subscription."""

    error_code = "INVALID_WEBHOOK"


class WebhookTargetRejectedError(DomainException):
    """The target did not answer the test POST acceptably."""

    http_status_code = status.HTTP_400_BAD_REQUEST
    error_code = "WEBHOOK_TARGET_REJECTED"
