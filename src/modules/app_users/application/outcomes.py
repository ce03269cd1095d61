"""Pipeline outcomes returned to the client API."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.modules.notifications.domain.entities import WebhookEvent


def iso_or_none(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class AuthOutcome:
    """Terminal result of a login, registration, verify or session call.

    ``event`` is the notification fired for this outcome, or None.
    """

    status_code: int
    success: bool
    message: str
    event: WebhookEvent | None = None
    body: dict[str, Any] = field(default_factory=dict)

    def to_body(self) -> dict[str, Any]:
        return {"success": self.success, "message": self.message, **self.body}
