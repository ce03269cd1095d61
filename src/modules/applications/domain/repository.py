"""Application repository interfaces."""

from abc import abstractmethod
from typing import Protocol

from src.core.domain.repository import BaseRepository
from src.modules.applications.domain.entities import Application


class ApplicationRepository(BaseRepository[Application]):
    """Application repository interface."""

    @abstractmethod
    async def get_by_api_key(self, api_key: str) -> Application | None:
        """Exact-match lookup; returns inactive applications too."""
        pass

    @abstractmethod
    async def list_by_owner(self, owner_id: str) -> list[Application]:
        pass


class ApplicationScopedData(Protocol):
    """Anything that stores rows belonging to one application.

    Used to cascade an application delete to its users, keys, sessions and logs.
    """

    async def delete_by_application(self, application_id: str) -> int: ...
