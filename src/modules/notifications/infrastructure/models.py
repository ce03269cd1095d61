"""Notification database models."""

from typing import Any

from sqlalchemy import JSON, Column, Index
from sqlmodel import Field

from src.core.infrastructure.database.base_model import BaseModel


class WebhookModel(BaseModel, table=True):
    """Webhook database model."""

    __tablename__ = "webhooks"

    owner_id: str = Field(nullable=False, index=True)
    url: str = Field(nullable=False, max_length=2048)
    secret: str | None = Field(default=None, max_length=255)
    events: list[str] = Field(default_factory=list, sa_type=JSON, nullable=False)
    is_active: bool = Field(default=True, nullable=False)


class ActivityLogModel(BaseModel, table=True):
    """Activity log database model."""

    __tablename__ = "activity_logs"
    __table_args__ = (
        Index("ix_activity_logs_application_created", "application_id", "created_at"),
    )

    application_id: str = Field(nullable=False, index=True)
    app_user_id: str | None = Field(default=None, index=True)
    event: str = Field(nullable=False, max_length=50)
    ip_address: str | None = Field(default=None, max_length=64)
    hwid: str | None = Field(default=None, max_length=255)
    user_agent: str | None = Field(default=None)
    # "metadata" 是 SQLAlchemy 保留属性名，列名保持为 metadata
    extra_data: dict[str, Any] | None = Field(
        default=None, sa_column=Column("metadata", JSON, nullable=True)
    )
    success: bool = Field(nullable=False)
    error_message: str | None = Field(default=None)
