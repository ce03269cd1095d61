"""License key owner API routes."""

from fastapi import APIRouter, Depends, status

from src.core.application.security import get_current_owner_id
from src.core.interfaces.http.response import ApiResponse
from src.modules.applications.application.dependencies import get_application_service
from src.modules.applications.application.service import ApplicationService
from src.modules.licenses.application.dependencies import get_license_registry
from src.modules.licenses.application.service import LicenseRegistry
from src.modules.licenses.interfaces.schemas import (
    CreateLicenseKeyRequest,
    GeneratedLicenseKeyResponse,
    LicenseKeyResponse,
)

router = APIRouter(
    prefix="/owner/applications/{application_id}/licenses", tags=["licenses"]
)


@router.get(
    "",
    response_model=ApiResponse[list[LicenseKeyResponse]],
    summary="列出许可证",
)
async def list_license_keys(
    application_id: str,
    owner_id: str = Depends(get_current_owner_id),
    applications: ApplicationService = Depends(get_application_service),
    registry: LicenseRegistry = Depends(get_license_registry),
) -> ApiResponse[list[LicenseKeyResponse]]:
    application = await applications.get_owned(owner_id, application_id)
    keys = await registry.list_for_application(application.id)
    return ApiResponse.success(data=[LicenseKeyResponse.from_entity(k) for k in keys])


@router.post(
    "",
    response_model=ApiResponse[LicenseKeyResponse],
    status_code=status.HTTP_201_CREATED,
    summary="创建许可证",
    description="license_key 留空时自动生成；validity_days 与 expires_at 至少提供一个。",
)
async def create_license_key(
    application_id: str,
    request: CreateLicenseKeyRequest,
    owner_id: str = Depends(get_current_owner_id),
    applications: ApplicationService = Depends(get_application_service),
    registry: LicenseRegistry = Depends(get_license_registry),
) -> ApiResponse[LicenseKeyResponse]:
    application = await applications.get_owned(owner_id, application_id)
    license_key = await registry.create(application.id, application.name, request)
    return ApiResponse.success(
        data=LicenseKeyResponse.from_entity(license_key),
        message="License key created successfully",
        code=status.HTTP_201_CREATED,
    )


@router.get(
    "/generate",
    response_model=ApiResponse[GeneratedLicenseKeyResponse],
    summary="预生成许可证字符串",
    description="仅生成字符串，不保存。",
)
async def generate_license_key(
    application_id: str,
    owner_id: str = Depends(get_current_owner_id),
    applications: ApplicationService = Depends(get_application_service),
    registry: LicenseRegistry = Depends(get_license_registry),
) -> ApiResponse[GeneratedLicenseKeyResponse]:
    application = await applications.get_owned(owner_id, application_id)
    return ApiResponse.success(
        data=GeneratedLicenseKeyResponse(
            generated_key=registry.generate_key(application.name)
        )
    )


@router.delete(
    "/{license_key_id}",
    response_model=ApiResponse[None],
    summary="删除许可证",
)
async def delete_license_key(
    application_id: str,
    license_key_id: str,
    owner_id: str = Depends(get_current_owner_id),
    applications: ApplicationService = Depends(get_application_service),
    registry: LicenseRegistry = Depends(get_license_registry),
) -> ApiResponse[None]:
    application = await applications.get_owned(owner_id, application_id)
    await registry.delete(application.id, license_key_id)
    return ApiResponse.success(message="License key deleted successfully")
