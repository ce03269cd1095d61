"""Licenses module application dependencies."""

from typing import NoReturn

from fastapi import Depends

from src.modules.licenses.application.service import LicenseRegistry
from src.modules.licenses.domain.repository import LicenseKeyRepository


def _missing_dependency(name: str) -> NoReturn:
    raise RuntimeError(f"Missing dependency override for {name}")


async def get_license_repository() -> LicenseKeyRepository:
    _missing_dependency("LicenseKeyRepository")


async def get_license_registry(
    repository: LicenseKeyRepository = Depends(get_license_repository),
) -> LicenseRegistry:
    return LicenseRegistry(repository)
