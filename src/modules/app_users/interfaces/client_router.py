"""Client SDK endpoints.

响应体保持扁平的 {"success", "message", ...} 结构，与 SDK 约定一致，
不使用控制台接口的 ApiResponse 包装。
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.core.domain.request_context import RequestContext
from src.core.interfaces.http.request_context import get_request_context
from src.modules.app_users.application.authorization import AuthorizationPipeline
from src.modules.app_users.application.dependencies import (
    get_authorization_pipeline,
    get_registration_pipeline,
    get_session_tracking_service,
    get_verification_service,
)
from src.modules.app_users.application.outcomes import AuthOutcome
from src.modules.app_users.application.registration import RegistrationPipeline
from src.modules.app_users.application.session_tracking import (
    SessionTrackingService,
)
from src.modules.app_users.application.verification import VerificationService
from src.modules.app_users.interfaces.schemas import (
    LoginRequest,
    RegisterRequest,
    TrackSessionRequest,
    VerifyRequest,
)
from src.modules.applications.domain.entities import Application
from src.modules.applications.interfaces.client_auth import get_client_application

router = APIRouter(tags=["client"])


def _respond(outcome: AuthOutcome) -> JSONResponse:
    return JSONResponse(status_code=outcome.status_code, content=outcome.to_body())


@router.post("/login", summary="终端用户登录")
async def login(
    request: LoginRequest,
    application: Application = Depends(get_client_application),
    context: RequestContext = Depends(get_request_context),
    pipeline: AuthorizationPipeline = Depends(get_authorization_pipeline),
) -> JSONResponse:
    return _respond(await pipeline.authorize(application, request, context))


@router.post("/register", summary="使用许可证注册")
async def register(
    request: RegisterRequest,
    application: Application = Depends(get_client_application),
    context: RequestContext = Depends(get_request_context),
    pipeline: RegistrationPipeline = Depends(get_registration_pipeline),
) -> JSONResponse:
    return _respond(await pipeline.register(application, request, context))


@router.post("/verify", summary="校验用户状态")
async def verify(
    request: VerifyRequest,
    application: Application = Depends(get_client_application),
    service: VerificationService = Depends(get_verification_service),
) -> JSONResponse:
    return _respond(await service.verify(application, request.user_id))


@router.post("/session/track", summary="会话跟踪")
async def track_session(
    request: TrackSessionRequest,
    application: Application = Depends(get_client_application),
    context: RequestContext = Depends(get_request_context),
    service: SessionTrackingService = Depends(get_session_tracking_service),
) -> JSONResponse:
    return _respond(await service.track(application, request, context))
