"""API router configuration."""

from fastapi import APIRouter

from src.modules.app_users.interfaces.client_router import router as client_router
from src.modules.app_users.interfaces.router import monitoring_router
from src.modules.app_users.interfaces.router import router as app_users_router
from src.modules.applications.interfaces.router import router as applications_router
from src.modules.blacklist.interfaces.router import router as blacklist_router
from src.modules.licenses.interfaces.router import router as licenses_router
from src.modules.notifications.interfaces.router import (
    activity_log_router,
    webhook_router,
)

api_router = APIRouter()

# Client SDK (API key)
api_router.include_router(client_router)

# Owner dashboard (JWT)
api_router.include_router(applications_router)
api_router.include_router(licenses_router)
api_router.include_router(app_users_router)
api_router.include_router(monitoring_router)
api_router.include_router(blacklist_router)

# Webhooks / activity logs
api_router.include_router(webhook_router)
api_router.include_router(activity_log_router)
