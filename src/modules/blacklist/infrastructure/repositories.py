"""Blacklist repository implementations."""

from datetime import UTC, datetime

from sqlalchemy import and_, or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from src.modules.blacklist.domain.entities import BlacklistEntry, BlacklistType
from src.modules.blacklist.domain.exceptions import BlacklistEntryNotFoundError
from src.modules.blacklist.domain.repository import BlacklistRepository
from src.modules.blacklist.infrastructure.mappers import BlacklistEntryMapper
from src.modules.blacklist.infrastructure.models import BlacklistEntryModel


class PostgreSQLBlacklistRepository(BlacklistRepository):
    """PostgreSQL blacklist repository implementation."""

    def __init__(self, session: AsyncSession, mapper: BlacklistEntryMapper):
        self.session = session
        self.mapper = mapper

    async def _get_model(self, entry_id: str) -> BlacklistEntryModel | None:
        statement = select(BlacklistEntryModel).where(
            BlacklistEntryModel.id == entry_id,
            col(BlacklistEntryModel.is_deleted).is_(False),
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_id(self, entry_id: str) -> BlacklistEntry | None:
        model = await self._get_model(entry_id)
        return self.mapper.to_domain(model) if model else None

    async def find_active(
        self,
        application_id: str,
        entry_type: BlacklistType,
        value: str,
        owner_id: str | None = None,
    ) -> BlacklistEntry | None:
        scope = col(BlacklistEntryModel.application_id) == application_id
        if owner_id is not None:
            scope = or_(
                scope,
                and_(
                    col(BlacklistEntryModel.application_id).is_(None),
                    col(BlacklistEntryModel.created_by) == owner_id,
                ),
            )
        statement = (
            select(BlacklistEntryModel)
            .where(
                BlacklistEntryModel.type == entry_type.value,
                BlacklistEntryModel.value == value,
                col(BlacklistEntryModel.is_active).is_(True),
                col(BlacklistEntryModel.is_deleted).is_(False),
                scope,
            )
            .order_by(col(BlacklistEntryModel.created_at))
            .limit(1)
        )
        result = await self.session.execute(statement)
        model = result.scalar_one_or_none()
        return self.mapper.to_domain(model) if model else None

    async def list_visible(
        self, owner_id: str, application_ids: list[str]
    ) -> list[BlacklistEntry]:
        statement = (
            select(BlacklistEntryModel)
            .where(
                col(BlacklistEntryModel.is_deleted).is_(False),
                or_(
                    col(BlacklistEntryModel.application_id).in_(application_ids),
                    and_(
                        col(BlacklistEntryModel.application_id).is_(None),
                        col(BlacklistEntryModel.created_by) == owner_id,
                    ),
                ),
            )
            .order_by(col(BlacklistEntryModel.created_at).desc())
        )
        result = await self.session.execute(statement)
        return self.mapper.to_domain_list(list(result.scalars().all()))

    async def create(self, entry: BlacklistEntry) -> BlacklistEntry:
        model = self.mapper.to_model(entry)
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return self.mapper.to_domain(model)

    async def update(self, entry: BlacklistEntry) -> BlacklistEntry:
        existing = await self._get_model(entry.id)
        if not existing:
            raise BlacklistEntryNotFoundError(entry.id)
        self.mapper.copy_to_model(entry, existing)
        self.session.add(existing)
        await self.session.flush()
        await self.session.refresh(existing)
        return self.mapper.to_domain(existing)

    async def delete(self, entry: BlacklistEntry | str) -> bool:
        entry_id = entry.id if isinstance(entry, BlacklistEntry) else entry
        model = await self._get_model(entry_id)
        if not model:
            return False
        model.is_deleted = True
        model.is_active = False
        self.session.add(model)
        await self.session.flush()
        return True

    async def delete_by_application(self, application_id: str) -> int:
        statement = (
            update(BlacklistEntryModel)
            .where(
                col(BlacklistEntryModel.application_id) == application_id,
                col(BlacklistEntryModel.is_deleted).is_(False),
            )
            .values(is_deleted=True, is_active=False, updated_at=datetime.now(UTC))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(statement)
        return result.rowcount or 0
