"""Notification ports."""

from abc import ABC, abstractmethod

from src.modules.notifications.domain.entities import (
    NotificationRequest,
    ProbeResult,
    Webhook,
    WebhookPayload,
)


class Notifier(ABC):
    """Hands a pipeline outcome to the notification system.

    ``notify`` must return immediately; delivery happens independently of
    the caller and its failures never reach the caller.
    """

    @abstractmethod
    def notify(self, request: NotificationRequest) -> None:
        pass


class WebhookDelivery(ABC):
    """Delivers one payload to one webhook, retrying as configured."""

    @property
    @abstractmethod
    def inter_delivery_delay(self) -> float:
        """Seconds to wait between consecutive deliveries of one event."""
        pass

    @abstractmethod
    async def send(self, webhook: Webhook, payload: WebhookPayload) -> bool:
        pass


class WebhookTargetProbe(ABC):
    """Synchronous reachability test run before a webhook is saved."""

    @abstractmethod
    async def probe(self, url: str) -> ProbeResult:
        pass
