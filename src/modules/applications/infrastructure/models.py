"""Application database models."""

from sqlmodel import Field

from src.core.infrastructure.database.base_model import BaseModel


class ApplicationModel(BaseModel, table=True):
    """Application database model."""

    __tablename__ = "applications"

    owner_id: str = Field(nullable=False, index=True)
    name: str = Field(nullable=False, max_length=100)
    description: str | None = Field(default=None)
    api_key: str = Field(nullable=False, unique=True, index=True, max_length=128)
    version: str = Field(default="1.0.0", nullable=False, max_length=50)
    hwid_lock_enabled: bool = Field(default=False, nullable=False)
    is_active: bool = Field(default=True, nullable=False)

    login_success_message: str | None = Field(default=None)
    login_failed_message: str | None = Field(default=None)
    account_disabled_message: str | None = Field(default=None)
    account_expired_message: str | None = Field(default=None)
    version_mismatch_message: str | None = Field(default=None)
    hwid_mismatch_message: str | None = Field(default=None)
