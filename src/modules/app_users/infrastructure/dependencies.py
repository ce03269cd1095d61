"""App users module infrastructure dependencies."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.infrastructure.database.session import get_db_session
from src.modules.app_users.infrastructure.mappers import (
    ActiveSessionMapper,
    AppUserMapper,
)
from src.modules.app_users.infrastructure.repositories import (
    PostgreSQLActiveSessionRepository,
    PostgreSQLAppUserRepository,
)


def get_app_user_mapper() -> AppUserMapper:
    return AppUserMapper()


def get_active_session_mapper() -> ActiveSessionMapper:
    return ActiveSessionMapper()


async def get_app_user_repository(
    session: AsyncSession = Depends(get_db_session),
    mapper: AppUserMapper = Depends(get_app_user_mapper),
) -> PostgreSQLAppUserRepository:
    return PostgreSQLAppUserRepository(session, mapper)


async def get_active_session_repository(
    session: AsyncSession = Depends(get_db_session),
    mapper: ActiveSessionMapper = Depends(get_active_session_mapper),
) -> PostgreSQLActiveSessionRepository:
    return PostgreSQLActiveSessionRepository(session, mapper)
