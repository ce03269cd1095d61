"""Webhook and activity log owner API routes."""

from fastapi import APIRouter, Depends, Query, status

from src.core.application.security import get_current_owner_id
from src.core.interfaces.http.response import ApiResponse
from src.modules.applications.application.dependencies import get_application_service
from src.modules.applications.application.service import ApplicationService
from src.modules.notifications.application.dependencies import (
    get_activity_log_query_service,
    get_webhook_service,
)
from src.modules.notifications.application.service import (
    ActivityLogQueryService,
    WebhookService,
)
from src.modules.notifications.interfaces.schemas import (
    ActivityLogResponse,
    CreateWebhookRequest,
    UpdateWebhookRequest,
    WebhookResponse,
    WebhookTestResponse,
)

webhook_router = APIRouter(prefix="/owner/webhooks", tags=["webhooks"])
activity_log_router = APIRouter(
    prefix="/owner/applications/{application_id}/activity-logs",
    tags=["activity-logs"],
)


@webhook_router.get(
    "",
    response_model=ApiResponse[list[WebhookResponse]],
    summary="列出 Webhook",
)
async def list_webhooks(
    owner_id: str = Depends(get_current_owner_id),
    service: WebhookService = Depends(get_webhook_service),
) -> ApiResponse[list[WebhookResponse]]:
    webhooks = await service.list_owned(owner_id)
    return ApiResponse.success(data=[WebhookResponse.from_entity(w) for w in webhooks])


@webhook_router.post(
    "",
    response_model=ApiResponse[WebhookResponse],
    status_code=status.HTTP_201_CREATED,
    summary="创建 Webhook（会先发送测试请求）",
)
async def create_webhook(
    request: CreateWebhookRequest,
    owner_id: str = Depends(get_current_owner_id),
    service: WebhookService = Depends(get_webhook_service),
) -> ApiResponse[WebhookResponse]:
    webhook, warning = await service.create(
        owner_id,
        request.url,
        request.events,
        secret=request.secret,
        is_active=request.is_active,
    )
    return ApiResponse.success(
        data=WebhookResponse.from_entity(webhook, warning),
        message="Webhook created successfully",
        code=status.HTTP_201_CREATED,
    )


@webhook_router.patch(
    "/{webhook_id}",
    response_model=ApiResponse[WebhookResponse],
    summary="更新 Webhook",
)
async def update_webhook(
    webhook_id: str,
    request: UpdateWebhookRequest,
    owner_id: str = Depends(get_current_owner_id),
    service: WebhookService = Depends(get_webhook_service),
) -> ApiResponse[WebhookResponse]:
    webhook, warning = await service.update(
        owner_id,
        webhook_id,
        url=request.url,
        events=request.events,
        secret=request.secret,
        is_active=request.is_active,
    )
    return ApiResponse.success(
        data=WebhookResponse.from_entity(webhook, warning),
        message="Webhook updated successfully",
    )


@webhook_router.delete(
    "/{webhook_id}",
    response_model=ApiResponse[None],
    summary="删除 Webhook",
)
async def delete_webhook(
    webhook_id: str,
    owner_id: str = Depends(get_current_owner_id),
    service: WebhookService = Depends(get_webhook_service),
) -> ApiResponse[None]:
    await service.delete(owner_id, webhook_id)
    return ApiResponse.success(message="Webhook deleted successfully")


@webhook_router.post(
    "/{webhook_id}/test",
    response_model=ApiResponse[WebhookTestResponse],
    summary="发送测试事件",
)
async def test_webhook(
    webhook_id: str,
    owner_id: str = Depends(get_current_owner_id),
    service: WebhookService = Depends(get_webhook_service),
) -> ApiResponse[WebhookTestResponse]:
    delivered = await service.send_test(owner_id, webhook_id)
    return ApiResponse.success(
        data=WebhookTestResponse(delivered=delivered),
        message="Test webhook delivered" if delivered else "Test webhook failed",
    )


@activity_log_router.get(
    "",
    response_model=ApiResponse[list[ActivityLogResponse]],
    summary="查看应用活动日志",
)
async def list_activity_logs(
    application_id: str,
    app_user_id: str | None = Query(default=None, description="按终端用户过滤"),
    limit: int = Query(default=100, ge=1, le=500),
    owner_id: str = Depends(get_current_owner_id),
    applications: ApplicationService = Depends(get_application_service),
    service: ActivityLogQueryService = Depends(get_activity_log_query_service),
) -> ApiResponse[list[ActivityLogResponse]]:
    await applications.get_owned(owner_id, application_id)
    if app_user_id:
        entries = [
            e
            for e in await service.list_for_app_user(app_user_id, limit)
            if e.application_id == application_id
        ]
    else:
        entries = await service.list_for_application(application_id, limit)
    return ApiResponse.success(
        data=[ActivityLogResponse.from_entity(e) for e in entries]
    )
