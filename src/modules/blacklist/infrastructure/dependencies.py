"""Blacklist module infrastructure dependencies."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.infrastructure.database.session import get_db_session
from src.modules.blacklist.infrastructure.mappers import BlacklistEntryMapper
from src.modules.blacklist.infrastructure.repositories import (
    PostgreSQLBlacklistRepository,
)


def get_blacklist_mapper() -> BlacklistEntryMapper:
    return BlacklistEntryMapper()


async def get_blacklist_repository(
    session: AsyncSession = Depends(get_db_session),
    mapper: BlacklistEntryMapper = Depends(get_blacklist_mapper),
) -> PostgreSQLBlacklistRepository:
    return PostgreSQLBlacklistRepository(session, mapper)
