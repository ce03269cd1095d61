"""Blacklist checker and owner management."""

from loguru import logger

from src.core.infrastructure.logging import BusinessEvents
from src.modules.blacklist.domain.entities import BlacklistEntry, BlacklistType
from src.modules.blacklist.domain.exceptions import (
    BlacklistAccessDeniedError,
    BlacklistEntryNotFoundError,
)
from src.modules.blacklist.domain.repository import BlacklistRepository


class BlacklistChecker:
    """Looks up denylist entries. Exact, case-sensitive matching only."""

    def __init__(self, repository: BlacklistRepository) -> None:
        self._repo = repository

    async def check(
        self,
        application_id: str,
        entry_type: BlacklistType,
        value: str | None,
        owner_id: str | None = None,
    ) -> BlacklistEntry | None:
        if not value:
            return None
        entry = await self._repo.find_active(application_id, entry_type, value, owner_id)
        if entry is not None:
            logger.info(
                f"Blacklist hit: {entry_type.value} entry {entry.id} "
                f"for application {application_id}"
            )
        return entry


class BlacklistService:
    """Owner-side blacklist management."""

    def __init__(self, repository: BlacklistRepository) -> None:
        self._repo = repository

    async def create(
        self,
        owner_id: str,
        entry_type: BlacklistType,
        value: str,
        application_id: str | None = None,
        reason: str | None = None,
    ) -> BlacklistEntry:
        """Create an entry. Application ownership is checked by the caller."""
        entry = BlacklistEntry(
            application_id=application_id,
            created_by=owner_id,
            type=entry_type,
            value=value,
            reason=reason,
        )
        created = await self._repo.create(entry)
        BusinessEvents.log_event(
            "blacklist_entry_created",
            user_id=owner_id,
            event_data={
                "entry_id": created.id,
                "type": entry_type.value,
                "application_id": application_id,
            },
        )
        return created

    async def list_visible(
        self, owner_id: str, application_ids: list[str]
    ) -> list[BlacklistEntry]:
        return await self._repo.list_visible(owner_id, application_ids)

    async def delete(
        self, owner_id: str, entry_id: str, owned_application_ids: list[str]
    ) -> None:
        entry = await self._repo.get_by_id(entry_id)
        if entry is None:
            raise BlacklistEntryNotFoundError(entry_id)
        if entry.is_global:
            if entry.created_by != owner_id:
                raise BlacklistAccessDeniedError()
        elif entry.application_id not in owned_application_ids:
            raise BlacklistAccessDeniedError()
        await self._repo.delete(entry)
