"""Blacklist database models."""

from sqlalchemy import Index
from sqlmodel import Field

from src.core.infrastructure.database.base_model import BaseModel


class BlacklistEntryModel(BaseModel, table=True):
    """Blacklist entry database model."""

    __tablename__ = "blacklist_entries"
    __table_args__ = (
        Index("ix_blacklist_entries_lookup", "type", "value", "application_id"),
    )

    application_id: str | None = Field(default=None, index=True)
    created_by: str = Field(nullable=False, index=True)
    type: str = Field(nullable=False, max_length=20)
    value: str = Field(nullable=False, max_length=255)
    reason: str | None = Field(default=None)
    is_active: bool = Field(default=True, nullable=False)
