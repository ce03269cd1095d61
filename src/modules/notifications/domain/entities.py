"""Notification domain entities."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.core.domain.base_entity import BaseEntity, utc_now


class WebhookEvent(str, Enum):
    """Event taxonomy shared by webhook subscriptions and the activity log."""

    USER_LOGIN = "user_login"
    LOGIN_FAILED = "login_failed"
    USER_REGISTER = "user_register"
    ACCOUNT_DISABLED = "account_disabled"
    ACCOUNT_EXPIRED = "account_expired"
    VERSION_MISMATCH = "version_mismatch"
    HWID_MISMATCH = "hwid_mismatch"
    LOGIN_BLOCKED_IP = "login_blocked_ip"
    LOGIN_BLOCKED_USERNAME = "login_blocked_username"
    LOGIN_BLOCKED_HWID = "login_blocked_hwid"
    SESSION_START = "session_start"
    SESSION_END = "session_end"


# 旧版客户端订阅时使用的事件名
EVENT_ALIASES: dict[str, WebhookEvent] = {
    "user_registration": WebhookEvent.USER_REGISTER,
}


def normalize_event_name(name: str) -> WebhookEvent:
    """Map a subscription value to its canonical event.

    Raises:
        ValueError: unknown event name
    """
    if name in EVENT_ALIASES:
        return EVENT_ALIASES[name]
    return WebhookEvent(name)


class Webhook(BaseEntity):
    """A tenant-owned delivery target."""

    owner_id: str = Field(..., description="所属 owner 账户 ID")
    url: str = Field(..., min_length=1, max_length=2048, description="投递地址")
    secret: str | None = Field(default=None, description="HMAC 签名密钥")
    events: list[WebhookEvent] = Field(default_factory=list, description="订阅的事件")
    is_active: bool = Field(default=True, description="是否启用")

    @field_validator("events", mode="before")
    @classmethod
    def _normalize_events(cls, value: Any) -> Any:
        if isinstance(value, list):
            normalized: list[WebhookEvent] = []
            for item in value:
                event = (
                    item if isinstance(item, WebhookEvent) else normalize_event_name(item)
                )
                if event not in normalized:
                    normalized.append(event)
            return normalized
        return value

    def subscribes_to(self, event: WebhookEvent) -> bool:
        return self.is_active and not self.is_deleted and event in self.events


class ActivityLog(BaseEntity):
    """Append-only audit record of one pipeline outcome."""

    application_id: str = Field(..., description="应用 ID")
    app_user_id: str | None = Field(default=None, description="终端用户 ID")
    event: WebhookEvent = Field(..., description="事件名")
    ip_address: str | None = Field(default=None)
    hwid: str | None = Field(default=None)
    user_agent: str | None = Field(default=None)
    metadata: dict[str, Any] | None = Field(default=None, description="事件附加信息")
    success: bool = Field(..., description="是否成功")
    error_message: str | None = Field(default=None)


class UserSnapshot(BaseModel):
    """The end-user facts a notification carries."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    username: str
    email: str | None = None
    hwid: str | None = None


class NotificationRequest(BaseModel):
    """One pipeline outcome to be logged and fanned out."""

    model_config = ConfigDict(frozen=True)

    owner_id: str
    application_id: str
    event: WebhookEvent
    success: bool
    user: UserSnapshot | None = None
    error_message: str | None = None
    metadata: dict[str, Any] | None = None
    ip_address: str | None = None
    hwid: str | None = None
    user_agent: str | None = None
    occurred_at: datetime = Field(default_factory=utc_now)


class WebhookUserData(BaseModel):
    id: str | None = None
    username: str
    email: str | None = None
    hwid: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


class WebhookPayload(BaseModel):
    """Wire payload of a webhook delivery."""

    event: str
    timestamp: str
    application_id: str
    user_data: WebhookUserData | None = None
    metadata: dict[str, Any] | None = None
    success: bool
    error_message: str | None = None

    @classmethod
    def from_request(cls, request: NotificationRequest) -> "WebhookPayload":
        user_data = None
        if request.user is not None:
            user_data = WebhookUserData(
                id=request.user.id,
                username=request.user.username,
                email=request.user.email,
                hwid=request.hwid or request.user.hwid,
                ip_address=request.ip_address,
                user_agent=request.user_agent,
            )
        return cls(
            event=request.event.value,
            timestamp=request.occurred_at.isoformat(),
            application_id=request.application_id,
            user_data=user_data,
            metadata=request.metadata,
            success=request.success,
            error_message=request.error_message,
        )

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class ProbeResult(BaseModel):
    """Outcome of the creation-time reachability test."""

    accepted: bool
    message: str
    warning: str | None = None
    status_code: int | None = None
