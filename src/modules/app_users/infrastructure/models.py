"""App user database models."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, UniqueConstraint
from sqlmodel import Field

from src.core.infrastructure.database.base_model import BaseModel


class AppUserModel(BaseModel, table=True):
    """App user database model."""

    __tablename__ = "app_users"
    __table_args__ = (
        UniqueConstraint(
            "application_id", "username", name="uq_app_users_application_username"
        ),
        UniqueConstraint(
            "application_id", "email", name="uq_app_users_application_email"
        ),
        CheckConstraint("login_attempts >= 0", name="ck_app_users_login_attempts"),
    )

    application_id: str = Field(nullable=False, index=True)
    license_key_id: str | None = Field(default=None, index=True)
    username: str = Field(nullable=False, max_length=255)
    password_hash: str = Field(nullable=False, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    is_active: bool = Field(default=True, nullable=False)
    is_paused: bool = Field(default=False, nullable=False)
    hwid: str | None = Field(default=None, max_length=255)
    expires_at: datetime | None = Field(
        default=None, sa_type=DateTime(timezone=True), nullable=True
    )
    login_attempts: int = Field(default=0, nullable=False)
    last_login: datetime | None = Field(
        default=None, sa_type=DateTime(timezone=True), nullable=True
    )
    last_login_attempt: datetime | None = Field(
        default=None, sa_type=DateTime(timezone=True), nullable=True
    )
    last_login_ip: str | None = Field(default=None, max_length=64)


class ActiveSessionModel(BaseModel, table=True):
    """Active session database model."""

    __tablename__ = "active_sessions"

    application_id: str = Field(nullable=False, index=True)
    app_user_id: str = Field(nullable=False, index=True)
    session_token: str = Field(nullable=False, unique=True, index=True, max_length=255)
    last_activity: datetime = Field(sa_type=DateTime(timezone=True), nullable=False)
    is_active: bool = Field(default=True, nullable=False)
    expires_at: datetime | None = Field(
        default=None, sa_type=DateTime(timezone=True), nullable=True
    )
    ip_address: str | None = Field(default=None, max_length=64)
    user_agent: str | None = Field(default=None)
    hwid: str | None = Field(default=None, max_length=255)
