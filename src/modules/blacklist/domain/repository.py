"""Blacklist repository interfaces."""

from abc import abstractmethod

from src.core.domain.repository import BaseRepository
from src.modules.blacklist.domain.entities import BlacklistEntry, BlacklistType


class BlacklistRepository(BaseRepository[BlacklistEntry]):
    """Blacklist repository interface."""

    @abstractmethod
    async def find_active(
        self,
        application_id: str,
        entry_type: BlacklistType,
        value: str,
        owner_id: str | None = None,
    ) -> BlacklistEntry | None:
        """Exact match on an active entry.

        Matches entries scoped to ``application_id`` and, when ``owner_id`` is
        given, that owner's application-less entries.
        """
        pass

    @abstractmethod
    async def list_visible(
        self, owner_id: str, application_ids: list[str]
    ) -> list[BlacklistEntry]:
        """Entries of the given applications plus the owner's global entries."""
        pass

    @abstractmethod
    async def delete_by_application(self, application_id: str) -> int:
        pass
