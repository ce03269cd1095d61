"""Keyward Backend - 多租户许可证认证服务入口。"""

from collections.abc import Callable
from typing import Any, cast

import sentry_sdk
from fastapi import FastAPI
from fastapi.concurrency import asynccontextmanager
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from loguru import logger
from starlette.middleware.cors import CORSMiddleware

from src.core.application import dependencies as core_app_deps
from src.core.application import security as app_security
from src.core.config import settings
from src.core.domain.exceptions import DomainException
from src.core.infrastructure.database.session import check_db_health, close_db, init_db
from src.core.infrastructure.logging import setup_logging
from src.core.infrastructure.security import jwt as infra_jwt
from src.core.infrastructure.security import passwords as infra_passwords
from src.core.interfaces.http.exceptions import (
    ClientApiError,
    client_api_exception_handler,
    domain_exception_handler,
    global_exception_handler,
    validation_exception_handler,
)
from src.core.interfaces.http.routers import api_router
from src.modules.app_users.application import dependencies as app_users_app_deps
from src.modules.app_users.infrastructure import dependencies as app_users_infra_deps
from src.modules.applications.application import dependencies as applications_app_deps
from src.modules.applications.infrastructure import (
    dependencies as applications_infra_deps,
)
from src.modules.blacklist.application import dependencies as blacklist_app_deps
from src.modules.blacklist.infrastructure import dependencies as blacklist_infra_deps
from src.modules.licenses.application import dependencies as licenses_app_deps
from src.modules.licenses.infrastructure import dependencies as licenses_infra_deps
from src.modules.notifications.application import (
    dependencies as notifications_app_deps,
)
from src.modules.notifications.infrastructure import (
    dependencies as notifications_infra_deps,
)
from src.modules.notifications.infrastructure.dispatcher import (
    NotificationDispatcher,
    build_session_delivery,
)
from src.modules.notifications.infrastructure.webhooks.sender import (
    HttpWebhookDelivery,
)


def custom_generate_unique_id(route: APIRoute) -> str:
    """Generate unique operation IDs for OpenAPI."""
    if route.tags:
        return f"{route.tags[0]}-{route.name}"
    return route.name


# 客户端 SDK 使用 API Key，控制台使用 JWT
openapi_security_schemes = {
    "BearerAuth": {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT",
        "description": "Owner JWT issued by the dashboard identity provider",
    },
    "ApiKeyAuth": {
        "type": "apiKey",
        "in": "header",
        "name": "X-API-Key",
        "description": (
            f"Application API key (prefix: {settings.APPLICATION_API_KEY_PREFIX}_)"
        ),
    },
}


def custom_openapi():
    """Customize OpenAPI schema to include both auth schemes."""
    if app.openapi_schema:
        return app.openapi_schema
    from fastapi.openapi.utils import get_openapi

    schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )
    schema["components"] = schema.get("components", {})
    schema["components"]["securitySchemes"] = openapi_security_schemes
    app.openapi_schema = schema
    return schema


# Initialize Sentry if configured
if settings.SENTRY_DSN and settings.ENVIRONMENT != "local":
    sentry_sdk.init(
        dsn=str(settings.SENTRY_DSN),
        enable_tracing=True,
        environment=settings.ENVIRONMENT,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging()
    logger.info("Starting Keyward backend...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    logger.info("Initializing database connection...")
    await init_db()

    # 通知分发器在进程内唯一，关闭时等待未完成的投递
    delivery = HttpWebhookDelivery()
    dispatcher = NotificationDispatcher(build_session_delivery(delivery))
    app.state.webhook_delivery = delivery
    app.state.notifier = dispatcher

    yield

    logger.info("Shutting down Keyward backend...")
    await dispatcher.drain(settings.NOTIFICATION_DRAIN_TIMEOUT_SEC)
    await close_db()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description=(
        "多租户许可证认证服务\n\n"
        "## 认证方式\n\n"
        "- **API Key**: 客户端 SDK 在 X-API-Key 请求头或 api_key 查询参数中传递\n"
        "- **JWT Bearer**: 控制台 owner 接口（/api/v1/owner/...）"
    ),
    version="0.1.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=f"{settings.API_V1_STR}/docs",
    redoc_url=f"{settings.API_V1_STR}/redoc",
    root_path=settings.ROOTPATH,
    generate_unique_id_function=custom_generate_unique_id,
    lifespan=lifespan,
)
app.openapi = cast(Callable[[], dict[str, Any]], custom_openapi)

# Dependency overrides (application -> infrastructure)
app.dependency_overrides[app_security.get_current_owner_id] = (
    infra_jwt.get_current_owner_id
)
app.dependency_overrides[core_app_deps.get_password_hasher] = (
    infra_passwords.get_password_hasher
)

app.dependency_overrides[applications_app_deps.get_application_repository] = (
    applications_infra_deps.get_application_repository
)
app.dependency_overrides[applications_app_deps.get_application_scoped_data] = (
    applications_infra_deps.get_application_scoped_data
)

app.dependency_overrides[licenses_app_deps.get_license_repository] = (
    licenses_infra_deps.get_license_repository
)

app.dependency_overrides[blacklist_app_deps.get_blacklist_repository] = (
    blacklist_infra_deps.get_blacklist_repository
)

app.dependency_overrides[app_users_app_deps.get_app_user_repository] = (
    app_users_infra_deps.get_app_user_repository
)
app.dependency_overrides[app_users_app_deps.get_active_session_repository] = (
    app_users_infra_deps.get_active_session_repository
)

app.dependency_overrides[notifications_app_deps.get_webhook_repository] = (
    notifications_infra_deps.get_webhook_repository
)
app.dependency_overrides[notifications_app_deps.get_activity_log_repository] = (
    notifications_infra_deps.get_activity_log_repository
)
app.dependency_overrides[notifications_app_deps.get_notifier] = (
    notifications_infra_deps.get_notifier
)
app.dependency_overrides[notifications_app_deps.get_webhook_delivery] = (
    notifications_infra_deps.get_webhook_delivery
)
app.dependency_overrides[notifications_app_deps.get_webhook_probe] = (
    notifications_infra_deps.get_webhook_probe
)

# Exception handlers
app.add_exception_handler(ClientApiError, client_api_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(DomainException, domain_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# CORS middleware
if settings.all_cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.all_cors_origins,
        allow_credentials=True,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )

# Include API router
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint.

    Returns:
        健康检查结果，包含整体状态和数据库状态
    """
    db_health_result = await check_db_health()
    db_ok = db_health_result.status.value == "ok"

    return {
        "status": "healthy" if db_ok else "unhealthy",
        "environment": settings.ENVIRONMENT,
        "version": "0.1.0",
        "components": {"database": db_health_result.to_dict()},
    }


@app.get("/", tags=["root"])
async def root():
    """Root endpoint."""
    return {
        "message": "Welcome to Keyward API",
        "docs": f"{settings.API_V1_STR}/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.SERVER_PORT,
        reload=settings.ENVIRONMENT == "local",
    )
