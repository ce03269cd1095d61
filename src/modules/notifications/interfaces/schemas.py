"""Webhook and activity log API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from src.modules.notifications.domain.entities import (
    ActivityLog,
    Webhook,
    WebhookEvent,
)


class CreateWebhookRequest(BaseModel):
    url: str = Field(..., min_length=1, max_length=2048, description="投递地址")
    events: list[str] = Field(..., min_length=1, description="订阅的事件名")
    secret: str | None = Field(default=None, max_length=255, description="签名密钥")
    is_active: bool = Field(default=True)


class UpdateWebhookRequest(BaseModel):
    url: str | None = Field(default=None, max_length=2048)
    events: list[str] | None = Field(default=None)
    secret: str | None = Field(default=None, max_length=255, description="空字符串表示清除")
    is_active: bool | None = None


class WebhookResponse(BaseModel):
    id: str
    url: str
    events: list[WebhookEvent]
    has_secret: bool
    is_active: bool
    created_at: datetime
    warning: str | None = None

    @classmethod
    def from_entity(
        cls, webhook: Webhook, warning: str | None = None
    ) -> "WebhookResponse":
        return cls(
            id=webhook.id,
            url=webhook.url,
            events=webhook.events,
            has_secret=bool(webhook.secret),
            is_active=webhook.is_active,
            created_at=webhook.created_at,
            warning=warning,
        )


class WebhookTestResponse(BaseModel):
    delivered: bool


class ActivityLogResponse(BaseModel):
    id: str
    application_id: str
    app_user_id: str | None
    event: WebhookEvent
    ip_address: str | None
    hwid: str | None
    user_agent: str | None
    metadata: dict[str, Any] | None
    success: bool
    error_message: str | None
    created_at: datetime

    @classmethod
    def from_entity(cls, entry: ActivityLog) -> "ActivityLogResponse":
        return cls(
            id=entry.id,
            application_id=entry.application_id,
            app_user_id=entry.app_user_id,
            event=entry.event,
            ip_address=entry.ip_address,
            hwid=entry.hwid,
            user_agent=entry.user_agent,
            metadata=entry.metadata,
            success=entry.success,
            error_message=entry.error_message,
            created_at=entry.created_at,
        )
