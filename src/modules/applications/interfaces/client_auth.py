"""API-key resolution for the client SDK endpoints.

Every ``/api/v1`` client call must resolve its API key to an active
application before any pipeline stage runs.
"""

from fastapi import Depends, Header, Query, status

from src.core.interfaces.http.exceptions import ClientApiError
from src.modules.applications.application.dependencies import get_application_service
from src.modules.applications.application.service import ApplicationService
from src.modules.applications.domain.entities import Application


async def get_client_application(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    api_key: str | None = Query(default=None, description="API Key（也可通过 X-API-Key 请求头传递）"),
    service: ApplicationService = Depends(get_application_service),
) -> Application:
    raw_key = x_api_key or api_key
    if not raw_key:
        raise ClientApiError("API key required", status.HTTP_401_UNAUTHORIZED)

    application = await service.resolve_api_key(raw_key)
    if application is None:
        raise ClientApiError(
            "Invalid or inactive API key", status.HTTP_401_UNAUTHORIZED
        )
    return application
