"""License key API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.core.config import settings
from src.modules.licenses.application.commands import CreateLicenseKeyCommand
from src.modules.licenses.domain.entities import LicenseKey


class CreateLicenseKeyRequest(CreateLicenseKeyCommand):
    """Create license key request."""

    class Config:
        json_schema_extra = {
            "example": {
                "max_users": 1,
                "validity_days": 30,
                "description": "Lifetime reseller batch #3",
            }
        }


class LicenseKeyResponse(BaseModel):
    """License key response."""

    id: str = Field(..., description="许可证 ID")
    license_key: str = Field(..., description="许可证字符串")
    max_users: int = Field(..., description="最大用户数")
    current_users: int = Field(..., description="已占用名额")
    validity_days: int | None = Field(None, description="有效天数")
    expires_at: datetime = Field(..., description="过期时间")
    is_active: bool = Field(..., description="是否启用")
    is_valid: bool = Field(..., description="当前是否可用于注册")
    description: str | None = Field(None, description="备注")
    created_at: datetime = Field(..., description="创建时间")

    @classmethod
    def from_entity(cls, license_key: LicenseKey) -> "LicenseKeyResponse":
        return cls(
            id=license_key.id,
            license_key=license_key.license_key,
            max_users=license_key.max_users,
            current_users=license_key.current_users,
            validity_days=license_key.validity_days,
            expires_at=license_key.expires_at,
            is_active=license_key.is_active,
            is_valid=license_key.is_valid(),
            description=license_key.description,
            created_at=license_key.created_at,
        )


class GeneratedLicenseKeyResponse(BaseModel):
    """Preview of a generated key string (not persisted)."""

    generated_key: str = Field(..., description="生成的许可证字符串")
    default_max_users: int = Field(default=settings.LICENSE_DEFAULT_MAX_USERS)
    default_validity_days: int = Field(default=settings.LICENSE_DEFAULT_VALIDITY_DAYS)
