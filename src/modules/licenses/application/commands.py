"""License commands."""

from datetime import datetime

from pydantic import BaseModel, Field


class CreateLicenseKeyCommand(BaseModel):
    """Create a license key. ``license_key`` is generated when omitted."""

    license_key: str | None = Field(default=None, min_length=1, max_length=255)
    max_users: int = Field(default=1, ge=1)
    validity_days: int | None = Field(default=None, ge=1)
    expires_at: datetime | None = None
    description: str | None = None
