"""App user owner API routes."""

from fastapi import APIRouter, Depends, status

from src.core.application.security import get_current_owner_id
from src.core.interfaces.http.response import ApiResponse
from src.modules.app_users.application.dependencies import (
    get_app_user_service,
    get_application_monitoring_service,
)
from src.modules.app_users.application.management import AppUserService
from src.modules.app_users.application.monitoring import (
    ApplicationMonitoringService,
    ApplicationStats,
)
from src.modules.app_users.interfaces.schemas import (
    ActiveSessionResponse,
    AppUserResponse,
    CreateAppUserRequest,
    UpdateAppUserRequest,
)
from src.modules.applications.application.dependencies import get_application_service
from src.modules.applications.application.service import ApplicationService

router = APIRouter(
    prefix="/owner/applications/{application_id}/users", tags=["app-users"]
)
monitoring_router = APIRouter(
    prefix="/owner/applications/{application_id}", tags=["monitoring"]
)


@router.get(
    "",
    response_model=ApiResponse[list[AppUserResponse]],
    summary="列出应用用户",
)
async def list_app_users(
    application_id: str,
    owner_id: str = Depends(get_current_owner_id),
    applications: ApplicationService = Depends(get_application_service),
    service: AppUserService = Depends(get_app_user_service),
) -> ApiResponse[list[AppUserResponse]]:
    await applications.get_owned(owner_id, application_id)
    users = await service.list_for_application(application_id)
    return ApiResponse.success(data=[AppUserResponse.from_entity(u) for u in users])


@router.post(
    "",
    response_model=ApiResponse[AppUserResponse],
    status_code=status.HTTP_201_CREATED,
    summary="创建应用用户（不占用许可证）",
)
async def create_app_user(
    application_id: str,
    request: CreateAppUserRequest,
    owner_id: str = Depends(get_current_owner_id),
    applications: ApplicationService = Depends(get_application_service),
    service: AppUserService = Depends(get_app_user_service),
) -> ApiResponse[AppUserResponse]:
    await applications.get_owned(owner_id, application_id)
    user = await service.create(application_id, request)
    return ApiResponse.success(
        data=AppUserResponse.from_entity(user),
        message="User created successfully",
        code=status.HTTP_201_CREATED,
    )


@router.get(
    "/{user_id}",
    response_model=ApiResponse[AppUserResponse],
    summary="获取应用用户",
)
async def get_app_user(
    application_id: str,
    user_id: str,
    owner_id: str = Depends(get_current_owner_id),
    applications: ApplicationService = Depends(get_application_service),
    service: AppUserService = Depends(get_app_user_service),
) -> ApiResponse[AppUserResponse]:
    await applications.get_owned(owner_id, application_id)
    user = await service.get(application_id, user_id)
    return ApiResponse.success(data=AppUserResponse.from_entity(user))


@router.patch(
    "/{user_id}",
    response_model=ApiResponse[AppUserResponse],
    summary="更新应用用户",
)
async def update_app_user(
    application_id: str,
    user_id: str,
    request: UpdateAppUserRequest,
    owner_id: str = Depends(get_current_owner_id),
    applications: ApplicationService = Depends(get_application_service),
    service: AppUserService = Depends(get_app_user_service),
) -> ApiResponse[AppUserResponse]:
    await applications.get_owned(owner_id, application_id)
    user = await service.update(application_id, user_id, request)
    return ApiResponse.success(
        data=AppUserResponse.from_entity(user), message="User updated successfully"
    )


@router.post(
    "/{user_id}/pause",
    response_model=ApiResponse[AppUserResponse],
    summary="暂停用户",
)
async def pause_app_user(
    application_id: str,
    user_id: str,
    owner_id: str = Depends(get_current_owner_id),
    applications: ApplicationService = Depends(get_application_service),
    service: AppUserService = Depends(get_app_user_service),
) -> ApiResponse[AppUserResponse]:
    await applications.get_owned(owner_id, application_id)
    user = await service.pause(application_id, user_id)
    return ApiResponse.success(
        data=AppUserResponse.from_entity(user), message="User paused"
    )


@router.post(
    "/{user_id}/unpause",
    response_model=ApiResponse[AppUserResponse],
    summary="恢复用户",
)
async def unpause_app_user(
    application_id: str,
    user_id: str,
    owner_id: str = Depends(get_current_owner_id),
    applications: ApplicationService = Depends(get_application_service),
    service: AppUserService = Depends(get_app_user_service),
) -> ApiResponse[AppUserResponse]:
    await applications.get_owned(owner_id, application_id)
    user = await service.unpause(application_id, user_id)
    return ApiResponse.success(
        data=AppUserResponse.from_entity(user), message="User unpaused"
    )


@router.post(
    "/{user_id}/reset-hwid",
    response_model=ApiResponse[AppUserResponse],
    summary="重置 HWID 绑定",
)
async def reset_app_user_hwid(
    application_id: str,
    user_id: str,
    owner_id: str = Depends(get_current_owner_id),
    applications: ApplicationService = Depends(get_application_service),
    service: AppUserService = Depends(get_app_user_service),
) -> ApiResponse[AppUserResponse]:
    await applications.get_owned(owner_id, application_id)
    user = await service.reset_hwid(application_id, user_id)
    return ApiResponse.success(
        data=AppUserResponse.from_entity(user), message="HWID reset successfully"
    )


@router.delete(
    "/{user_id}",
    response_model=ApiResponse[None],
    summary="删除应用用户",
)
async def delete_app_user(
    application_id: str,
    user_id: str,
    owner_id: str = Depends(get_current_owner_id),
    applications: ApplicationService = Depends(get_application_service),
    service: AppUserService = Depends(get_app_user_service),
) -> ApiResponse[None]:
    await applications.get_owned(owner_id, application_id)
    await service.delete(application_id, user_id)
    return ApiResponse.success(message="User deleted successfully")


@monitoring_router.get(
    "/sessions",
    response_model=ApiResponse[list[ActiveSessionResponse]],
    summary="查看活跃会话",
)
async def list_active_sessions(
    application_id: str,
    owner_id: str = Depends(get_current_owner_id),
    applications: ApplicationService = Depends(get_application_service),
    service: ApplicationMonitoringService = Depends(
        get_application_monitoring_service
    ),
) -> ApiResponse[list[ActiveSessionResponse]]:
    await applications.get_owned(owner_id, application_id)
    sessions = await service.list_active_sessions(application_id)
    return ApiResponse.success(
        data=[ActiveSessionResponse.from_entity(s) for s in sessions]
    )


@monitoring_router.get(
    "/stats",
    response_model=ApiResponse[ApplicationStats],
    summary="应用实时统计",
)
async def get_application_stats(
    application_id: str,
    owner_id: str = Depends(get_current_owner_id),
    applications: ApplicationService = Depends(get_application_service),
    service: ApplicationMonitoringService = Depends(
        get_application_monitoring_service
    ),
) -> ApiResponse[ApplicationStats]:
    application = await applications.get_owned(owner_id, application_id)
    return ApiResponse.success(data=await service.stats(application))
