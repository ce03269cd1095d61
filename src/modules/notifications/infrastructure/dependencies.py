"""Notifications module infrastructure dependencies."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.infrastructure.database.session import get_db_session
from src.modules.notifications.domain.ports import Notifier, WebhookDelivery
from src.modules.notifications.infrastructure.dispatcher import TransactionalNotifier
from src.modules.notifications.infrastructure.mappers import (
    ActivityLogMapper,
    WebhookMapper,
)
from src.modules.notifications.infrastructure.repositories import (
    PostgreSQLActivityLogRepository,
    PostgreSQLWebhookRepository,
)
from src.modules.notifications.infrastructure.webhooks.probe import HttpWebhookProbe


def get_webhook_mapper() -> WebhookMapper:
    return WebhookMapper()


def get_activity_log_mapper() -> ActivityLogMapper:
    return ActivityLogMapper()


async def get_webhook_repository(
    session: AsyncSession = Depends(get_db_session),
    mapper: WebhookMapper = Depends(get_webhook_mapper),
) -> PostgreSQLWebhookRepository:
    return PostgreSQLWebhookRepository(session, mapper)


async def get_activity_log_repository(
    session: AsyncSession = Depends(get_db_session),
    mapper: ActivityLogMapper = Depends(get_activity_log_mapper),
) -> PostgreSQLActivityLogRepository:
    return PostgreSQLActivityLogRepository(session, mapper)


def get_notifier(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> Notifier:
    """Request-scoped notifier over the process-wide dispatcher.

    通知在请求事务提交后才交给 lifespan 中创建的 dispatcher。
    """
    return TransactionalNotifier(session, request.app.state.notifier)


def get_webhook_delivery(request: Request) -> WebhookDelivery:
    return request.app.state.webhook_delivery


def get_webhook_probe() -> HttpWebhookProbe:
    return HttpWebhookProbe()
