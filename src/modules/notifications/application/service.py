"""Notification application services.

The login and registration pipelines hand outcomes to a ``Notifier``; the
background delivery path then calls ``NotificationService.log_and_notify``
which:
1. appends an activity log row (a failure here is logged and ignored)
2. looks up the owner's webhooks subscribed to the event
3. delivers to each, one after another, with a pause in between
"""

import asyncio
from urllib.parse import urlparse

from loguru import logger

from src.core.infrastructure.logging import BusinessEvents
from src.modules.notifications.domain.entities import (
    ActivityLog,
    NotificationRequest,
    Webhook,
    WebhookEvent,
    WebhookPayload,
    normalize_event_name,
)
from src.modules.notifications.domain.exceptions import (
    InvalidWebhookError,
    WebhookAccessDeniedError,
    WebhookNotFoundError,
    WebhookTargetRejectedError,
)
from src.modules.notifications.domain.ports import (
    Notifier,
    WebhookDelivery,
    WebhookTargetProbe,
)
from src.modules.notifications.domain.repository import (
    ActivityLogRepository,
    WebhookRepository,
)


class NotificationService:
    """Activity logging plus webhook fan-out for one outcome."""

    def __init__(
        self,
        activity_logs: ActivityLogRepository,
        webhooks: WebhookRepository,
        delivery: WebhookDelivery,
    ):
        self.activity_logs = activity_logs
        self.webhooks = webhooks
        self.delivery = delivery

    async def record_activity(self, request: NotificationRequest) -> ActivityLog | None:
        entry = ActivityLog(
            application_id=request.application_id,
            app_user_id=request.user.id if request.user else None,
            event=request.event,
            ip_address=request.ip_address,
            hwid=request.hwid,
            user_agent=request.user_agent,
            metadata=request.metadata,
            success=request.success,
            error_message=request.error_message,
        )
        try:
            return await self.activity_logs.create(entry)
        except Exception as e:
            logger.warning(
                f"Failed to write activity log for {request.event.value}: {e}"
            )
            BusinessEvents.activity_log_failed(
                application_id=request.application_id,
                event=request.event.value,
                error=str(e),
            )
            return None

    async def subscribed_webhooks(self, request: NotificationRequest) -> list[Webhook]:
        return await self.webhooks.list_subscribed(request.owner_id, request.event)

    async def fan_out(
        self, request: NotificationRequest, webhooks: list[Webhook]
    ) -> tuple[int, int]:
        """Deliver to every webhook in order. Returns (succeeded, failed)."""
        if not webhooks:
            return 0, 0

        payload = WebhookPayload.from_request(request)
        succeeded = failed = 0
        for index, webhook in enumerate(webhooks):
            if index > 0:
                await asyncio.sleep(self.delivery.inter_delivery_delay)
            try:
                ok = await self.delivery.send(webhook, payload)
            except Exception as e:
                logger.exception(f"Webhook {webhook.id} delivery crashed: {e}")
                ok = False
            if ok:
                succeeded += 1
            else:
                failed += 1

        BusinessEvents.webhook_fanout_summary(
            application_id=request.application_id,
            event=request.event.value,
            succeeded=succeeded,
            failed=failed,
        )
        return succeeded, failed

    async def log_and_notify(self, request: NotificationRequest) -> tuple[int, int]:
        await self.record_activity(request)
        webhooks = await self.subscribed_webhooks(request)
        return await self.fan_out(request, webhooks)


def validate_webhook_url(url: str) -> str:
    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidWebhookError("Webhook URL must be a valid HTTP(S) URL")
    return url.strip()


def normalize_events(events: list[str]) -> list[WebhookEvent]:
    normalized: list[WebhookEvent] = []
    for name in events:
        try:
            event = normalize_event_name(name)
        except ValueError:
            raise InvalidWebhookError(f"Unknown webhook event: {name}") from None
        if event not in normalized:
            normalized.append(event)
    if not normalized:
        raise InvalidWebhookError("At least one event is required")
    return normalized


class WebhookService:
    """Owner-side webhook management."""

    def __init__(
        self,
        repository: WebhookRepository,
        probe: WebhookTargetProbe,
        delivery: WebhookDelivery,
    ):
        self.repository = repository
        self.probe = probe
        self.delivery = delivery

    async def _ensure_reachable(self, url: str) -> str | None:
        """Run the test POST. Returns a warning to surface, if any."""
        result = await self.probe.probe(url)
        if not result.accepted:
            raise WebhookTargetRejectedError(result.message)
        if result.warning:
            logger.warning(f"Webhook probe warning for {url}: {result.warning}")
        return result.warning

    async def create(
        self,
        owner_id: str,
        url: str,
        events: list[str],
        secret: str | None = None,
        is_active: bool = True,
    ) -> tuple[Webhook, str | None]:
        url = validate_webhook_url(url)
        webhook = Webhook(
            owner_id=owner_id,
            url=url,
            secret=secret or None,
            events=normalize_events(events),
            is_active=is_active,
        )
        warning = await self._ensure_reachable(url)
        created = await self.repository.create(webhook)
        BusinessEvents.log_event(
            "webhook_created",
            user_id=owner_id,
            event_data={"webhook_id": created.id},
        )
        return created, warning

    async def get_owned(self, owner_id: str, webhook_id: str) -> Webhook:
        webhook = await self.repository.get_by_id(webhook_id)
        if webhook is None:
            raise WebhookNotFoundError(webhook_id)
        if webhook.owner_id != owner_id:
            raise WebhookAccessDeniedError()
        return webhook

    async def list_owned(self, owner_id: str) -> list[Webhook]:
        return await self.repository.list_by_owner(owner_id)

    async def update(
        self,
        owner_id: str,
        webhook_id: str,
        url: str | None = None,
        events: list[str] | None = None,
        secret: str | None = None,
        is_active: bool | None = None,
    ) -> tuple[Webhook, str | None]:
        webhook = await self.get_owned(owner_id, webhook_id)
        warning = None

        if url is not None:
            url = validate_webhook_url(url)
            if url != webhook.url:
                warning = await self._ensure_reachable(url)
                webhook.url = url
        if events is not None:
            webhook.events = normalize_events(events)
        if secret is not None:
            webhook.secret = secret or None
        if is_active is not None:
            webhook.is_active = is_active

        webhook._update_timestamp()
        return await self.repository.update(webhook), warning

    async def delete(self, owner_id: str, webhook_id: str) -> None:
        webhook = await self.get_owned(owner_id, webhook_id)
        await self.repository.delete(webhook)

    async def send_test(self, owner_id: str, webhook_id: str) -> bool:
        """Deliver a synthetic ``user_login`` payload through the normal path."""
        webhook = await self.get_owned(owner_id, webhook_id)
        request = NotificationRequest(
            owner_id=owner_id,
            application_id="test",
            event=WebhookEvent.USER_LOGIN,
            success=True,
            metadata={"test": True, "message": "Webhook test delivery"},
        )
        return await self.delivery.send(webhook, WebhookPayload.from_request(request))


class ActivityLogQueryService:
    def __init__(self, repository: ActivityLogRepository):
        self.repository = repository

    async def list_for_application(
        self, application_id: str, limit: int = 100
    ) -> list[ActivityLog]:
        return await self.repository.list_by_application(application_id, limit)

    async def list_for_app_user(
        self, app_user_id: str, limit: int = 100
    ) -> list[ActivityLog]:
        return await self.repository.list_by_app_user(app_user_id, limit)


def dispatch_notification(notifier: Notifier, request: NotificationRequest) -> None:
    """Hand a request to the notifier; scheduling failures are only logged."""
    try:
        notifier.notify(request)
    except Exception as e:
        logger.exception(f"Failed to schedule {request.event.value} notification: {e}")
