"""Blacklist module application dependencies."""

from typing import NoReturn

from fastapi import Depends

from src.modules.blacklist.application.service import BlacklistChecker, BlacklistService
from src.modules.blacklist.domain.repository import BlacklistRepository


def _missing_dependency(name: str) -> NoReturn:
    raise RuntimeError(f"Missing dependency override for {name}")


async def get_blacklist_repository() -> BlacklistRepository:
    _missing_dependency("BlacklistRepository")


async def get_blacklist_checker(
    repository: BlacklistRepository = Depends(get_blacklist_repository),
) -> BlacklistChecker:
    return BlacklistChecker(repository)


async def get_blacklist_service(
    repository: BlacklistRepository = Depends(get_blacklist_repository),
) -> BlacklistService:
    return BlacklistService(repository)
