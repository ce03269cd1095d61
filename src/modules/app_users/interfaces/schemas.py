"""App user API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.modules.app_users.application.commands import (
    CreateAppUserCommand,
    LoginCommand,
    RegisterCommand,
    TrackSessionCommand,
    UpdateAppUserCommand,
)
from src.modules.app_users.domain.entities import ActiveSession, AppUser


class LoginRequest(LoginCommand):
    """Client login request."""

    class Config:
        json_schema_extra = {
            "example": {
                "username": "player1",
                "password": "hunter2",
                "version": "1.0.0",
                "hwid": "HWID-1234",
            }
        }


class RegisterRequest(RegisterCommand):
    """Client registration request."""


class VerifyRequest(BaseModel):
    user_id: str | None = None


class TrackSessionRequest(TrackSessionCommand):
    """``action`` is one of start / heartbeat / end."""


class CreateAppUserRequest(CreateAppUserCommand):
    """Owner-side create request."""


class UpdateAppUserRequest(UpdateAppUserCommand):
    """Owner-side update request."""


class AppUserResponse(BaseModel):
    """App user (owner view). The password hash is never returned."""

    id: str = Field(..., description="用户 ID")
    application_id: str
    license_key_id: str | None
    username: str
    email: str | None
    is_active: bool
    is_paused: bool
    hwid: str | None
    expires_at: datetime | None
    login_attempts: int
    last_login: datetime | None
    last_login_ip: str | None
    created_at: datetime

    @classmethod
    def from_entity(cls, user: AppUser) -> "AppUserResponse":
        return cls(
            id=user.id,
            application_id=user.application_id,
            license_key_id=user.license_key_id,
            username=user.username,
            email=user.email,
            is_active=user.is_active,
            is_paused=user.is_paused,
            hwid=user.hwid,
            expires_at=user.expires_at,
            login_attempts=user.login_attempts,
            last_login=user.last_login,
            last_login_ip=user.last_login_ip,
            created_at=user.created_at,
        )


class ActiveSessionResponse(BaseModel):
    """Active client session (owner view)."""

    id: str
    app_user_id: str = Field(..., description="终端用户 ID")
    session_token: str
    last_activity: datetime
    ip_address: str | None
    user_agent: str | None
    hwid: str | None
    created_at: datetime

    @classmethod
    def from_entity(cls, session: ActiveSession) -> "ActiveSessionResponse":
        return cls(
            id=session.id,
            app_user_id=session.app_user_id,
            session_token=session.session_token,
            last_activity=session.last_activity,
            ip_address=session.ip_address,
            user_agent=session.user_agent,
            hwid=session.hwid,
            created_at=session.created_at,
        )
