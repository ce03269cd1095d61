"""Application API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.modules.applications.application.commands import (
    CreateApplicationCommand,
    UpdateApplicationCommand,
)
from src.modules.applications.domain.entities import Application, MessageTemplate


class CreateApplicationRequest(CreateApplicationCommand):
    """Create application request."""

    class Config:
        json_schema_extra = {
            "example": {
                "name": "My Loader",
                "version": "1.0.0",
                "hwid_lock_enabled": True,
                "login_failed_message": "Wrong username or password",
            }
        }


class UpdateApplicationRequest(UpdateApplicationCommand):
    """Update application request."""


class ApplicationResponse(BaseModel):
    """Application response (owner view, includes the API key)."""

    id: str = Field(..., description="应用 ID")
    name: str = Field(..., description="应用名称")
    description: str | None = Field(None, description="应用描述")
    api_key: str = Field(..., description="API Key")
    version: str = Field(..., description="要求的客户端版本")
    hwid_lock_enabled: bool = Field(..., description="是否开启 HWID 绑定")
    is_active: bool = Field(..., description="是否启用")
    login_success_message: str = Field(..., description="登录成功提示")
    login_failed_message: str = Field(..., description="登录失败提示")
    account_disabled_message: str = Field(..., description="账户禁用提示")
    account_expired_message: str = Field(..., description="账户过期提示")
    version_mismatch_message: str = Field(..., description="版本不匹配提示")
    hwid_mismatch_message: str = Field(..., description="HWID 不匹配提示")
    created_at: datetime = Field(..., description="创建时间")

    @classmethod
    def from_entity(cls, application: Application) -> "ApplicationResponse":
        messages = {
            f"{template.value}_message": application.message(template)
            for template in MessageTemplate
        }
        return cls(
            id=application.id,
            name=application.name,
            description=application.description,
            api_key=application.api_key,
            version=application.version,
            hwid_lock_enabled=application.hwid_lock_enabled,
            is_active=application.is_active,
            created_at=application.created_at,
            **messages,
        )
