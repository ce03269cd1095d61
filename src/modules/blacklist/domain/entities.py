"""Blacklist domain entities."""

from enum import Enum

from pydantic import Field

from src.core.domain.base_entity import BaseEntity


class BlacklistType(str, Enum):
    IP = "ip"
    USERNAME = "username"
    HWID = "hwid"
    EMAIL = "email"


class BlacklistEntry(BaseEntity):
    """A denylist rule.

    ``application_id`` None means the rule covers every application of the
    owner who created it.
    """

    application_id: str | None = Field(default=None, description="所属应用 ID，为空表示 owner 全局")
    created_by: str = Field(..., description="创建者 owner 账户 ID")
    type: BlacklistType = Field(..., description="黑名单类型")
    value: str = Field(..., min_length=1, max_length=255, description="匹配值（精确、区分大小写）")
    reason: str | None = Field(default=None, description="原因")
    is_active: bool = Field(default=True, description="是否生效")

    @property
    def is_global(self) -> bool:
        return self.application_id is None
