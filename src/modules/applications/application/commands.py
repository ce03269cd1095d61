"""Application commands."""

from pydantic import BaseModel, Field


class CreateApplicationCommand(BaseModel):
    """Create an application for an owner."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    version: str = "1.0.0"
    hwid_lock_enabled: bool = False
    login_success_message: str | None = None
    login_failed_message: str | None = None
    account_disabled_message: str | None = None
    account_expired_message: str | None = None
    version_mismatch_message: str | None = None
    hwid_mismatch_message: str | None = None


class UpdateApplicationCommand(BaseModel):
    """Partial update; unset fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    version: str | None = None
    hwid_lock_enabled: bool | None = None
    is_active: bool | None = None
    login_success_message: str | None = None
    login_failed_message: str | None = None
    account_disabled_message: str | None = None
    account_expired_message: str | None = None
    version_mismatch_message: str | None = None
    hwid_mismatch_message: str | None = None
