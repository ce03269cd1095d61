"""Notification repository implementations."""

from datetime import UTC, datetime

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from src.modules.notifications.domain.entities import (
    ActivityLog,
    Webhook,
    WebhookEvent,
)
from src.modules.notifications.domain.exceptions import WebhookNotFoundError
from src.modules.notifications.domain.repository import (
    ActivityLogRepository,
    WebhookRepository,
)
from src.modules.notifications.infrastructure.mappers import (
    ActivityLogMapper,
    WebhookMapper,
)
from src.modules.notifications.infrastructure.models import (
    ActivityLogModel,
    WebhookModel,
)


class PostgreSQLWebhookRepository(WebhookRepository):
    """PostgreSQL webhook repository implementation."""

    def __init__(self, session: AsyncSession, mapper: WebhookMapper):
        self.session = session
        self.mapper = mapper

    async def _get_model(self, webhook_id: str) -> WebhookModel | None:
        statement = select(WebhookModel).where(
            WebhookModel.id == webhook_id,
            col(WebhookModel.is_deleted).is_(False),
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_id(self, webhook_id: str) -> Webhook | None:
        model = await self._get_model(webhook_id)
        return self.mapper.to_domain(model) if model else None

    async def list_by_owner(self, owner_id: str) -> list[Webhook]:
        statement = (
            select(WebhookModel)
            .where(
                WebhookModel.owner_id == owner_id,
                col(WebhookModel.is_deleted).is_(False),
            )
            .order_by(col(WebhookModel.created_at))
        )
        result = await self.session.execute(statement)
        return self.mapper.to_domain_list(list(result.scalars().all()))

    async def list_subscribed(
        self, owner_id: str, event: WebhookEvent
    ) -> list[Webhook]:
        statement = (
            select(WebhookModel)
            .where(
                WebhookModel.owner_id == owner_id,
                col(WebhookModel.is_active).is_(True),
                col(WebhookModel.is_deleted).is_(False),
            )
            .order_by(col(WebhookModel.created_at))
        )
        result = await self.session.execute(statement)
        # events 是 JSON 列，订阅过滤在内存中完成（每个 owner 的 webhook 数量很少）
        webhooks = self.mapper.to_domain_list(list(result.scalars().all()))
        return [w for w in webhooks if w.subscribes_to(event)]

    async def create(self, webhook: Webhook) -> Webhook:
        model = self.mapper.to_model(webhook)
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return self.mapper.to_domain(model)

    async def update(self, webhook: Webhook) -> Webhook:
        existing = await self._get_model(webhook.id)
        if not existing:
            raise WebhookNotFoundError(webhook.id)
        self.mapper.copy_to_model(webhook, existing)
        self.session.add(existing)
        await self.session.flush()
        await self.session.refresh(existing)
        return self.mapper.to_domain(existing)

    async def delete(self, webhook: Webhook | str) -> bool:
        webhook_id = webhook.id if isinstance(webhook, Webhook) else webhook
        model = await self._get_model(webhook_id)
        if not model:
            return False
        model.is_deleted = True
        model.is_active = False
        self.session.add(model)
        await self.session.flush()
        return True


class PostgreSQLActivityLogRepository(ActivityLogRepository):
    """PostgreSQL activity log repository implementation."""

    def __init__(self, session: AsyncSession, mapper: ActivityLogMapper):
        self.session = session
        self.mapper = mapper

    async def get_by_id(self, log_id: str) -> ActivityLog | None:
        statement = select(ActivityLogModel).where(
            ActivityLogModel.id == log_id,
            col(ActivityLogModel.is_deleted).is_(False),
        )
        result = await self.session.execute(statement)
        model = result.scalar_one_or_none()
        return self.mapper.to_domain(model) if model else None

    async def list_by_application(
        self, application_id: str, limit: int = 100
    ) -> list[ActivityLog]:
        statement = (
            select(ActivityLogModel)
            .where(
                ActivityLogModel.application_id == application_id,
                col(ActivityLogModel.is_deleted).is_(False),
            )
            .order_by(col(ActivityLogModel.created_at).desc())
            .limit(limit)
        )
        result = await self.session.execute(statement)
        return self.mapper.to_domain_list(list(result.scalars().all()))

    async def list_by_app_user(
        self, app_user_id: str, limit: int = 100
    ) -> list[ActivityLog]:
        statement = (
            select(ActivityLogModel)
            .where(
                ActivityLogModel.app_user_id == app_user_id,
                col(ActivityLogModel.is_deleted).is_(False),
            )
            .order_by(col(ActivityLogModel.created_at).desc())
            .limit(limit)
        )
        result = await self.session.execute(statement)
        return self.mapper.to_domain_list(list(result.scalars().all()))

    async def create(self, entry: ActivityLog) -> ActivityLog:
        model = self.mapper.to_model(entry)
        # savepoint: 写日志失败时不影响外层事务
        async with self.session.begin_nested():
            self.session.add(model)
            await self.session.flush()
        return self.mapper.to_domain(model)

    async def update(self, entry: ActivityLog) -> ActivityLog:
        raise NotImplementedError("Activity logs are append-only")

    async def delete(self, entry: ActivityLog | str) -> bool:
        raise NotImplementedError("Activity logs are append-only")

    async def delete_by_application(self, application_id: str) -> int:
        statement = (
            update(ActivityLogModel)
            .where(
                col(ActivityLogModel.application_id) == application_id,
                col(ActivityLogModel.is_deleted).is_(False),
            )
            .values(is_deleted=True, updated_at=datetime.now(UTC))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(statement)
        return result.rowcount or 0
