"""Blacklist owner API routes."""

from fastapi import APIRouter, Depends, status

from src.core.application.security import get_current_owner_id
from src.core.interfaces.http.response import ApiResponse
from src.modules.applications.application.dependencies import get_application_service
from src.modules.applications.application.service import ApplicationService
from src.modules.blacklist.application.dependencies import get_blacklist_service
from src.modules.blacklist.application.service import BlacklistService
from src.modules.blacklist.interfaces.schemas import (
    BlacklistEntryResponse,
    CreateBlacklistEntryRequest,
)

router = APIRouter(prefix="/owner/blacklist", tags=["blacklist"])


async def _owned_application_ids(
    owner_id: str, applications: ApplicationService
) -> list[str]:
    return [a.id for a in await applications.list_owned(owner_id)]


@router.get(
    "",
    response_model=ApiResponse[list[BlacklistEntryResponse]],
    summary="列出黑名单",
)
async def list_blacklist(
    owner_id: str = Depends(get_current_owner_id),
    applications: ApplicationService = Depends(get_application_service),
    service: BlacklistService = Depends(get_blacklist_service),
) -> ApiResponse[list[BlacklistEntryResponse]]:
    application_ids = await _owned_application_ids(owner_id, applications)
    entries = await service.list_visible(owner_id, application_ids)
    return ApiResponse.success(
        data=[BlacklistEntryResponse.from_entity(e) for e in entries]
    )


@router.post(
    "",
    response_model=ApiResponse[BlacklistEntryResponse],
    status_code=status.HTTP_201_CREATED,
    summary="添加黑名单",
)
async def create_blacklist_entry(
    request: CreateBlacklistEntryRequest,
    owner_id: str = Depends(get_current_owner_id),
    applications: ApplicationService = Depends(get_application_service),
    service: BlacklistService = Depends(get_blacklist_service),
) -> ApiResponse[BlacklistEntryResponse]:
    if request.application_id is not None:
        await applications.get_owned(owner_id, request.application_id)
    entry = await service.create(
        owner_id,
        request.type,
        request.value,
        application_id=request.application_id,
        reason=request.reason,
    )
    return ApiResponse.success(
        data=BlacklistEntryResponse.from_entity(entry),
        message="Blacklist entry created successfully",
        code=status.HTTP_201_CREATED,
    )


@router.delete(
    "/{entry_id}",
    response_model=ApiResponse[None],
    summary="删除黑名单",
)
async def delete_blacklist_entry(
    entry_id: str,
    owner_id: str = Depends(get_current_owner_id),
    applications: ApplicationService = Depends(get_application_service),
    service: BlacklistService = Depends(get_blacklist_service),
) -> ApiResponse[None]:
    application_ids = await _owned_application_ids(owner_id, applications)
    await service.delete(owner_id, entry_id, application_ids)
    return ApiResponse.success(message="Blacklist entry deleted successfully")
