"""Application owner API routes."""

from fastapi import APIRouter, Depends, status

from src.core.application.security import get_current_owner_id
from src.core.interfaces.http.response import ApiResponse
from src.modules.applications.application.dependencies import get_application_service
from src.modules.applications.application.service import ApplicationService
from src.modules.applications.interfaces.schemas import (
    ApplicationResponse,
    CreateApplicationRequest,
    UpdateApplicationRequest,
)

router = APIRouter(prefix="/owner/applications", tags=["applications"])


@router.post(
    "",
    response_model=ApiResponse[ApplicationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="创建应用",
)
async def create_application(
    request: CreateApplicationRequest,
    owner_id: str = Depends(get_current_owner_id),
    service: ApplicationService = Depends(get_application_service),
) -> ApiResponse[ApplicationResponse]:
    application = await service.create(owner_id, request)
    return ApiResponse.success(
        data=ApplicationResponse.from_entity(application),
        message="Application created successfully",
        code=status.HTTP_201_CREATED,
    )


@router.get(
    "",
    response_model=ApiResponse[list[ApplicationResponse]],
    summary="列出应用",
)
async def list_applications(
    owner_id: str = Depends(get_current_owner_id),
    service: ApplicationService = Depends(get_application_service),
) -> ApiResponse[list[ApplicationResponse]]:
    applications = await service.list_owned(owner_id)
    return ApiResponse.success(
        data=[ApplicationResponse.from_entity(a) for a in applications]
    )


@router.get(
    "/{application_id}",
    response_model=ApiResponse[ApplicationResponse],
    summary="获取应用详情",
)
async def get_application(
    application_id: str,
    owner_id: str = Depends(get_current_owner_id),
    service: ApplicationService = Depends(get_application_service),
) -> ApiResponse[ApplicationResponse]:
    application = await service.get_owned(owner_id, application_id)
    return ApiResponse.success(data=ApplicationResponse.from_entity(application))


@router.patch(
    "/{application_id}",
    response_model=ApiResponse[ApplicationResponse],
    summary="更新应用",
    description="部分更新。API Key 创建后不可修改。",
)
async def update_application(
    application_id: str,
    request: UpdateApplicationRequest,
    owner_id: str = Depends(get_current_owner_id),
    service: ApplicationService = Depends(get_application_service),
) -> ApiResponse[ApplicationResponse]:
    application = await service.update(owner_id, application_id, request)
    return ApiResponse.success(
        data=ApplicationResponse.from_entity(application),
        message="Application updated successfully",
    )


@router.delete(
    "/{application_id}",
    response_model=ApiResponse[None],
    summary="删除应用",
    description="删除应用及其用户、许可证、黑名单、会话和活动日志。",
)
async def delete_application(
    application_id: str,
    owner_id: str = Depends(get_current_owner_id),
    service: ApplicationService = Depends(get_application_service),
) -> ApiResponse[None]:
    await service.delete(owner_id, application_id)
    return ApiResponse.success(message="Application deleted successfully")
