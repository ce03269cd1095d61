"""Licenses module infrastructure dependencies."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.infrastructure.database.session import get_db_session
from src.modules.licenses.infrastructure.mappers import LicenseKeyMapper
from src.modules.licenses.infrastructure.repositories import (
    PostgreSQLLicenseKeyRepository,
)


def get_license_mapper() -> LicenseKeyMapper:
    return LicenseKeyMapper()


async def get_license_repository(
    session: AsyncSession = Depends(get_db_session),
    mapper: LicenseKeyMapper = Depends(get_license_mapper),
) -> PostgreSQLLicenseKeyRepository:
    return PostgreSQLLicenseKeyRepository(session, mapper)
