"""Blacklist API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.modules.blacklist.domain.entities import BlacklistEntry, BlacklistType


class CreateBlacklistEntryRequest(BaseModel):
    """Create blacklist entry request."""

    type: BlacklistType = Field(..., description="ip / username / hwid / email")
    value: str = Field(..., min_length=1, max_length=255, description="精确匹配值")
    application_id: str | None = Field(
        default=None, description="应用 ID；为空则作用于该 owner 的全部应用"
    )
    reason: str | None = Field(default=None, description="原因")


class BlacklistEntryResponse(BaseModel):
    id: str
    type: BlacklistType
    value: str
    application_id: str | None
    reason: str | None
    is_active: bool
    created_at: datetime

    @classmethod
    def from_entity(cls, entry: BlacklistEntry) -> "BlacklistEntryResponse":
        return cls(
            id=entry.id,
            type=entry.type,
            value=entry.value,
            application_id=entry.application_id,
            reason=entry.reason,
            is_active=entry.is_active,
            created_at=entry.created_at,
        )
