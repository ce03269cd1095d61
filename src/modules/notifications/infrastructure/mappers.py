"""Notification entity-model mappers."""

from src.core.infrastructure.database.mapper import BaseMapper
from src.modules.notifications.domain.entities import (
    ActivityLog,
    Webhook,
    WebhookEvent,
)
from src.modules.notifications.infrastructure.models import (
    ActivityLogModel,
    WebhookModel,
)


class WebhookMapper(BaseMapper[Webhook, WebhookModel]):
    def to_domain(self, model: WebhookModel) -> Webhook:
        return Webhook(
            id=model.id,
            owner_id=model.owner_id,
            url=model.url,
            secret=model.secret,
            events=list(model.events or []),
            is_active=model.is_active,
            created_at=model.created_at,
            updated_at=model.updated_at,
            is_deleted=model.is_deleted,
        )

    def to_model(self, entity: Webhook) -> WebhookModel:
        return WebhookModel(
            id=entity.id,
            owner_id=entity.owner_id,
            url=entity.url,
            secret=entity.secret,
            events=[e.value for e in entity.events],
            is_active=entity.is_active,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            is_deleted=entity.is_deleted,
        )


class ActivityLogMapper(BaseMapper[ActivityLog, ActivityLogModel]):
    def to_domain(self, model: ActivityLogModel) -> ActivityLog:
        return ActivityLog(
            id=model.id,
            application_id=model.application_id,
            app_user_id=model.app_user_id,
            event=WebhookEvent(model.event),
            ip_address=model.ip_address,
            hwid=model.hwid,
            user_agent=model.user_agent,
            metadata=model.extra_data,
            success=model.success,
            error_message=model.error_message,
            created_at=model.created_at,
            updated_at=model.updated_at,
            is_deleted=model.is_deleted,
        )

    def to_model(self, entity: ActivityLog) -> ActivityLogModel:
        return ActivityLogModel(
            id=entity.id,
            application_id=entity.application_id,
            app_user_id=entity.app_user_id,
            event=entity.event.value,
            ip_address=entity.ip_address,
            hwid=entity.hwid,
            user_agent=entity.user_agent,
            extra_data=entity.metadata,
            success=entity.success,
            error_message=entity.error_message,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            is_deleted=entity.is_deleted,
        )
