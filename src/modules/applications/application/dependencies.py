"""Applications module application dependencies.

Provides service and repository without importing infrastructure.
"""

from collections.abc import Sequence
from typing import NoReturn

from fastapi import Depends

from src.modules.applications.application.service import ApplicationService
from src.modules.applications.domain.repository import (
    ApplicationRepository,
    ApplicationScopedData,
)


def _missing_dependency(name: str) -> NoReturn:
    raise RuntimeError(f"Missing dependency override for {name}")


async def get_application_repository() -> ApplicationRepository:
    _missing_dependency("ApplicationRepository")


async def get_application_scoped_data() -> Sequence[ApplicationScopedData]:
    _missing_dependency("ApplicationScopedData")


async def get_application_service(
    repository: ApplicationRepository = Depends(get_application_repository),
    scoped_data: Sequence[ApplicationScopedData] = Depends(
        get_application_scoped_data
    ),
) -> ApplicationService:
    return ApplicationService(repository=repository, scoped_data=scoped_data)
