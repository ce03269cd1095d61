"""App user commands."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class LoginCommand(BaseModel):
    username: str = ""
    password: str = ""
    version: str | None = None
    hwid: str | None = None


class RegisterCommand(BaseModel):
    username: str = ""
    password: str = ""
    email: str | None = None
    license_key: str = ""
    version: str | None = None
    hwid: str | None = None


class SessionAction(str, Enum):
    START = "start"
    HEARTBEAT = "heartbeat"
    END = "end"


class TrackSessionCommand(BaseModel):
    user_id: str | None = None
    session_token: str | None = None
    action: str | None = None


class CreateAppUserCommand(BaseModel):
    """Owner-side creation; bypasses license gating."""

    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)
    email: str | None = Field(default=None, max_length=255)
    expires_at: datetime | None = None
    hwid: str | None = Field(default=None, max_length=255)
    is_active: bool = True


class UpdateAppUserCommand(BaseModel):
    """Partial update; unset fields are left unchanged."""

    email: str | None = Field(default=None, max_length=255)
    password: str | None = Field(default=None, min_length=1)
    expires_at: datetime | None = None
    is_active: bool | None = None
    hwid: str | None = Field(default=None, max_length=255)
