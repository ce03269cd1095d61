"""Notifications module application dependencies."""

from typing import NoReturn

from fastapi import Depends

from src.modules.notifications.application.service import (
    ActivityLogQueryService,
    WebhookService,
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


def _missing_dependency(name: str) -> NoReturn:
    raise RuntimeError(f"Missing dependency override for {name}")


async def get_webhook_repository() -> WebhookRepository:
    _missing_dependency("WebhookRepository")


async def get_activity_log_repository() -> ActivityLogRepository:
    _missing_dependency("ActivityLogRepository")


def get_webhook_delivery() -> WebhookDelivery:
    _missing_dependency("WebhookDelivery")


def get_webhook_probe() -> WebhookTargetProbe:
    _missing_dependency("WebhookTargetProbe")


def get_notifier() -> Notifier:
    _missing_dependency("Notifier")


async def get_webhook_service(
    repository: WebhookRepository = Depends(get_webhook_repository),
    probe: WebhookTargetProbe = Depends(get_webhook_probe),
    delivery: WebhookDelivery = Depends(get_webhook_delivery),
) -> WebhookService:
    return WebhookService(repository, probe, delivery)


async def get_activity_log_query_service(
    repository: ActivityLogRepository = Depends(get_activity_log_repository),
) -> ActivityLogQueryService:
    return ActivityLogQueryService(repository)
