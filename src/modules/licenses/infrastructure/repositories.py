"""License key repository implementations."""

from datetime import UTC, datetime

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from src.modules.licenses.domain.entities import LicenseKey
from src.modules.licenses.domain.exceptions import LicenseKeyNotFoundError
from src.modules.licenses.domain.repository import LicenseKeyRepository
from src.modules.licenses.infrastructure.mappers import LicenseKeyMapper
from src.modules.licenses.infrastructure.models import LicenseKeyModel


class PostgreSQLLicenseKeyRepository(LicenseKeyRepository):
    """PostgreSQL license key repository implementation."""

    def __init__(self, session: AsyncSession, mapper: LicenseKeyMapper):
        self.session = session
        self.mapper = mapper

    async def _get_model(self, license_key_id: str) -> LicenseKeyModel | None:
        statement = select(LicenseKeyModel).where(
            LicenseKeyModel.id == license_key_id,
            col(LicenseKeyModel.is_deleted).is_(False),
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_id(self, license_key_id: str) -> LicenseKey | None:
        model = await self._get_model(license_key_id)
        return self.mapper.to_domain(model) if model else None

    async def get_by_key(self, license_key: str) -> LicenseKey | None:
        statement = select(LicenseKeyModel).where(
            LicenseKeyModel.license_key == license_key,
            col(LicenseKeyModel.is_deleted).is_(False),
        )
        result = await self.session.execute(statement)
        model = result.scalar_one_or_none()
        return self.mapper.to_domain(model) if model else None

    async def list_by_application(self, application_id: str) -> list[LicenseKey]:
        statement = (
            select(LicenseKeyModel)
            .where(
                LicenseKeyModel.application_id == application_id,
                col(LicenseKeyModel.is_deleted).is_(False),
            )
            .order_by(col(LicenseKeyModel.created_at).desc())
        )
        result = await self.session.execute(statement)
        return self.mapper.to_domain_list(list(result.scalars().all()))

    async def try_consume(
        self, license_key_id: str, now: datetime
    ) -> LicenseKey | None:
        # 单条条件 UPDATE ... RETURNING，行锁保证并发注册不会超出 max_users
        statement = (
            update(LicenseKeyModel)
            .where(
                col(LicenseKeyModel.id) == license_key_id,
                col(LicenseKeyModel.is_deleted).is_(False),
                col(LicenseKeyModel.is_active).is_(True),
                col(LicenseKeyModel.expires_at) > now,
                col(LicenseKeyModel.current_users) < col(LicenseKeyModel.max_users),
            )
            .values(
                current_users=col(LicenseKeyModel.current_users) + 1,
                updated_at=now,
            )
            .returning(LicenseKeyModel)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(statement)
        model = result.scalar_one_or_none()
        return self.mapper.to_domain(model) if model else None

    async def release(self, license_key_id: str) -> LicenseKey | None:
        statement = (
            update(LicenseKeyModel)
            .where(
                col(LicenseKeyModel.id) == license_key_id,
                col(LicenseKeyModel.current_users) > 0,
            )
            .values(
                current_users=func.greatest(col(LicenseKeyModel.current_users) - 1, 0),
                updated_at=datetime.now(UTC),
            )
            .returning(LicenseKeyModel)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(statement)
        model = result.scalar_one_or_none()
        return self.mapper.to_domain(model) if model else None

    async def create(self, license_key: LicenseKey) -> LicenseKey:
        model = self.mapper.to_model(license_key)
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return self.mapper.to_domain(model)

    async def update(self, license_key: LicenseKey) -> LicenseKey:
        existing = await self._get_model(license_key.id)
        if not existing:
            raise LicenseKeyNotFoundError(license_key.id)

        # 计数器只通过 try_consume / release 原子修改
        self.mapper.copy_to_model(
            license_key, existing, exclude=frozenset({"current_users"})
        )
        self.session.add(existing)
        await self.session.flush()
        await self.session.refresh(existing)
        return self.mapper.to_domain(existing)

    async def delete(self, license_key: LicenseKey | str) -> bool:
        license_key_id = (
            license_key.id if isinstance(license_key, LicenseKey) else license_key
        )
        model = await self._get_model(license_key_id)
        if not model:
            return False

        model.is_deleted = True
        model.is_active = False
        self.session.add(model)
        await self.session.flush()
        return True

    async def delete_by_application(self, application_id: str) -> int:
        statement = (
            update(LicenseKeyModel)
            .where(
                col(LicenseKeyModel.application_id) == application_id,
                col(LicenseKeyModel.is_deleted).is_(False),
            )
            .values(is_deleted=True, is_active=False, updated_at=datetime.now(UTC))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(statement)
        return result.rowcount or 0
