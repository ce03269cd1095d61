"""License key domain entities."""

from datetime import datetime

from pydantic import Field, model_validator

from src.core.domain.base_entity import BaseEntity, utc_now


class LicenseKey(BaseEntity):
    """A consumable registration capability scoped to one application.

    Invariant: ``0 <= current_users <= max_users``.
    """

    application_id: str = Field(..., description="所属应用 ID")
    license_key: str = Field(..., min_length=1, max_length=255, description="许可证字符串")
    max_users: int = Field(default=1, ge=1, description="最大用户数")
    current_users: int = Field(default=0, ge=0, description="已占用名额")
    validity_days: int | None = Field(default=None, ge=1, description="有效天数")
    expires_at: datetime = Field(..., description="过期时间")
    is_active: bool = Field(default=True, description="是否启用")
    description: str | None = Field(default=None, description="备注")

    @model_validator(mode="after")
    def _check_capacity(self) -> "LicenseKey":
        if self.current_users > self.max_users:
            raise ValueError("current_users cannot exceed max_users")
        return self

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utc_now()) >= self.expires_at

    def has_capacity(self) -> bool:
        return self.current_users < self.max_users

    def is_valid(self, now: datetime | None = None) -> bool:
        """``active and now < expires_at and current_users < max_users``."""
        return (
            self.is_active
            and not self.is_deleted
            and not self.is_expired(now)
            and self.has_capacity()
        )
