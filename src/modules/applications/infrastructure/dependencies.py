"""Applications module infrastructure dependencies."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.infrastructure.database.session import get_db_session
from src.modules.applications.domain.repository import ApplicationScopedData
from src.modules.applications.infrastructure.mappers import ApplicationMapper
from src.modules.applications.infrastructure.repositories import (
    PostgreSQLApplicationRepository,
)
from src.modules.app_users.infrastructure.dependencies import (
    get_active_session_repository,
    get_app_user_repository,
)
from src.modules.blacklist.infrastructure.dependencies import get_blacklist_repository
from src.modules.licenses.infrastructure.dependencies import get_license_repository
from src.modules.notifications.infrastructure.dependencies import (
    get_activity_log_repository,
)


def get_application_mapper() -> ApplicationMapper:
    return ApplicationMapper()


async def get_application_repository(
    session: AsyncSession = Depends(get_db_session),
    mapper: ApplicationMapper = Depends(get_application_mapper),
) -> PostgreSQLApplicationRepository:
    return PostgreSQLApplicationRepository(session, mapper)


async def get_application_scoped_data(
    app_users=Depends(get_app_user_repository),
    sessions=Depends(get_active_session_repository),
    licenses=Depends(get_license_repository),
    blacklist=Depends(get_blacklist_repository),
    activity_logs=Depends(get_activity_log_repository),
) -> list[ApplicationScopedData]:
    return [app_users, sessions, licenses, blacklist, activity_logs]
