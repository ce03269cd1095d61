"""Application repository implementations."""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from src.modules.applications.domain.entities import Application
from src.modules.applications.domain.exceptions import ApplicationNotFoundError
from src.modules.applications.domain.repository import ApplicationRepository
from src.modules.applications.infrastructure.mappers import ApplicationMapper
from src.modules.applications.infrastructure.models import ApplicationModel


class PostgreSQLApplicationRepository(ApplicationRepository):
    """PostgreSQL application repository implementation."""

    def __init__(self, session: AsyncSession, mapper: ApplicationMapper):
        self.session = session
        self.mapper = mapper

    async def _get_model(self, application_id: str) -> ApplicationModel | None:
        statement = select(ApplicationModel).where(
            ApplicationModel.id == application_id,
            col(ApplicationModel.is_deleted).is_(False),
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_id(self, application_id: str) -> Application | None:
        model = await self._get_model(application_id)
        return self.mapper.to_domain(model) if model else None

    async def get_by_api_key(self, api_key: str) -> Application | None:
        statement = select(ApplicationModel).where(
            ApplicationModel.api_key == api_key,
            col(ApplicationModel.is_deleted).is_(False),
        )
        result = await self.session.execute(statement)
        model = result.scalar_one_or_none()
        return self.mapper.to_domain(model) if model else None

    async def list_by_owner(self, owner_id: str) -> list[Application]:
        statement = (
            select(ApplicationModel)
            .where(
                ApplicationModel.owner_id == owner_id,
                col(ApplicationModel.is_deleted).is_(False),
            )
            .order_by(col(ApplicationModel.created_at).desc())
        )
        result = await self.session.execute(statement)
        return self.mapper.to_domain_list(list(result.scalars().all()))

    async def create(self, application: Application) -> Application:
        model = self.mapper.to_model(application)
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return self.mapper.to_domain(model)

    async def update(self, application: Application) -> Application:
        existing = await self._get_model(application.id)
        if not existing:
            raise ApplicationNotFoundError(application.id)

        # api_key 创建后不可变
        self.mapper.copy_to_model(application, existing, exclude=frozenset({"api_key"}))
        self.session.add(existing)
        await self.session.flush()
        await self.session.refresh(existing)
        return self.mapper.to_domain(existing)

    async def delete(self, application: Application | str) -> bool:
        application_id = (
            application.id if isinstance(application, Application) else application
        )
        model = await self._get_model(application_id)
        if not model:
            return False

        model.is_deleted = True
        model.is_active = False
        self.session.add(model)
        await self.session.flush()
        return True
