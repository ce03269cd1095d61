"""App user domain entities."""

from datetime import datetime

from pydantic import Field

from src.core.domain.base_entity import BaseEntity, utc_now
from src.modules.notifications.domain.entities import UserSnapshot


class AppUser(BaseEntity):
    """An end-user of one application.

    ``(application_id, username)`` is unique, as is ``(application_id, email)``
    when an email is present. The HWID is bound automatically at most once;
    only an owner reset clears it.
    """

    application_id: str = Field(..., description="所属应用 ID")
    license_key_id: str | None = Field(
        default=None, description="注册时使用的许可证，后台创建的用户为空"
    )
    username: str = Field(..., min_length=1, max_length=255, description="用户名")
    password_hash: str = Field(..., description="bcrypt 哈希")
    email: str | None = Field(default=None, max_length=255, description="邮箱")
    is_active: bool = Field(default=True, description="是否启用")
    is_paused: bool = Field(default=False, description="是否临时暂停")
    hwid: str | None = Field(default=None, max_length=255, description="绑定的硬件 ID")
    expires_at: datetime | None = Field(default=None, description="账户过期时间")
    login_attempts: int = Field(default=0, ge=0, description="连续失败次数")
    last_login: datetime | None = Field(default=None)
    last_login_attempt: datetime | None = Field(default=None)
    last_login_ip: str | None = Field(default=None, max_length=64)

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at is not None and (now or utc_now()) > self.expires_at

    def snapshot(self) -> UserSnapshot:
        return UserSnapshot(
            id=self.id, username=self.username, email=self.email, hwid=self.hwid
        )

    def pause(self) -> None:
        self.is_paused = True
        self._update_timestamp()

    def unpause(self) -> None:
        self.is_paused = False
        self._update_timestamp()

    def reset_hwid(self) -> None:
        self.hwid = None
        self._update_timestamp()


class ActiveSession(BaseEntity):
    """A client-tracked session keyed by a caller-supplied token."""

    application_id: str = Field(..., description="所属应用 ID")
    app_user_id: str = Field(..., description="终端用户 ID")
    session_token: str = Field(..., min_length=1, max_length=255, description="会话令牌")
    last_activity: datetime = Field(default_factory=utc_now, description="最后活跃时间")
    is_active: bool = Field(default=True)
    expires_at: datetime | None = Field(default=None)
    ip_address: str | None = Field(default=None, max_length=64)
    user_agent: str | None = Field(default=None)
    hwid: str | None = Field(default=None, max_length=255)
