"""License key database models."""

from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime
from sqlmodel import Field

from src.core.infrastructure.database.base_model import BaseModel


class LicenseKeyModel(BaseModel, table=True):
    """License key database model."""

    __tablename__ = "license_keys"
    __table_args__ = (
        CheckConstraint("max_users >= 1", name="ck_license_keys_max_users"),
        CheckConstraint(
            "current_users >= 0 AND current_users <= max_users",
            name="ck_license_keys_current_users",
        ),
    )

    application_id: str = Field(nullable=False, index=True)
    license_key: str = Field(nullable=False, unique=True, index=True, max_length=255)
    max_users: int = Field(default=1, nullable=False)
    current_users: int = Field(default=0, nullable=False)
    validity_days: int | None = Field(default=None)
    expires_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    is_active: bool = Field(default=True, nullable=False)
    description: str | None = Field(default=None)
