"""App user repository implementations."""

from datetime import UTC, datetime

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from src.core.domain.exceptions import EntityNotFoundError
from src.modules.app_users.domain.entities import ActiveSession, AppUser
from src.modules.app_users.domain.exceptions import (
    AppUserConflictError,
    AppUserNotFoundError,
    SessionTokenConflictError,
)
from src.modules.app_users.domain.repository import (
    ActiveSessionRepository,
    AppUserRepository,
)
from src.modules.app_users.infrastructure.mappers import (
    ActiveSessionMapper,
    AppUserMapper,
)
from src.modules.app_users.infrastructure.models import (
    ActiveSessionModel,
    AppUserModel,
)


def _conflict_from(error: IntegrityError, user: AppUser) -> AppUserConflictError:
    if "uq_app_users_application_email" in str(error.orig):
        return AppUserConflictError("email", user.email or "")
    return AppUserConflictError("username", user.username)


class PostgreSQLAppUserRepository(AppUserRepository):
    """PostgreSQL app user repository implementation.

    App users are hard-deleted; ``is_deleted`` is never set.
    """

    def __init__(self, session: AsyncSession, mapper: AppUserMapper):
        self.session = session
        self.mapper = mapper

    async def _get_model(self, user_id: str) -> AppUserModel | None:
        result = await self.session.execute(
            select(AppUserModel).where(AppUserModel.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: str) -> AppUser | None:
        model = await self._get_model(user_id)
        return self.mapper.to_domain(model) if model else None

    async def get_by_username(
        self, application_id: str, username: str
    ) -> AppUser | None:
        statement = select(AppUserModel).where(
            AppUserModel.application_id == application_id,
            AppUserModel.username == username,
        )
        result = await self.session.execute(statement)
        model = result.scalar_one_or_none()
        return self.mapper.to_domain(model) if model else None

    async def get_by_email(self, application_id: str, email: str) -> AppUser | None:
        statement = select(AppUserModel).where(
            AppUserModel.application_id == application_id,
            AppUserModel.email == email,
        )
        result = await self.session.execute(statement)
        model = result.scalar_one_or_none()
        return self.mapper.to_domain(model) if model else None

    async def list_by_application(self, application_id: str) -> list[AppUser]:
        statement = (
            select(AppUserModel)
            .where(AppUserModel.application_id == application_id)
            .order_by(col(AppUserModel.created_at).desc())
        )
        result = await self.session.execute(statement)
        return self.mapper.to_domain_list(list(result.scalars().all()))

    async def create(self, user: AppUser) -> AppUser:
        model = self.mapper.to_model(user)
        try:
            async with self.session.begin_nested():
                self.session.add(model)
                await self.session.flush()
        except IntegrityError as e:
            raise _conflict_from(e, user) from e
        await self.session.refresh(model)
        return self.mapper.to_domain(model)

    async def update(self, user: AppUser) -> AppUser:
        existing = await self._get_model(user.id)
        if not existing:
            raise AppUserNotFoundError(user.id)
        # 登录计数只通过原子语句修改
        self.mapper.copy_to_model(
            user,
            existing,
            exclude=frozenset({"login_attempts", "last_login", "last_login_attempt"}),
        )
        try:
            async with self.session.begin_nested():
                self.session.add(existing)
                await self.session.flush()
        except IntegrityError as e:
            raise _conflict_from(e, user) from e
        await self.session.refresh(existing)
        return self.mapper.to_domain(existing)

    async def delete(self, user: AppUser | str) -> bool:
        user_id = user.id if isinstance(user, AppUser) else user
        result = await self.session.execute(
            delete(AppUserModel).where(col(AppUserModel.id) == user_id)
        )
        return bool(result.rowcount)

    async def record_failed_attempt(self, user_id: str, at: datetime) -> int:
        statement = (
            update(AppUserModel)
            .where(col(AppUserModel.id) == user_id)
            .values(
                login_attempts=col(AppUserModel.login_attempts) + 1,
                last_login_attempt=at,
                updated_at=at,
            )
            .returning(col(AppUserModel.login_attempts))
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none() or 0

    async def record_successful_login(
        self, user_id: str, at: datetime, ip_address: str | None
    ) -> AppUser | None:
        statement = (
            update(AppUserModel)
            .where(col(AppUserModel.id) == user_id)
            .values(
                login_attempts=0,
                last_login=at,
                last_login_attempt=at,
                last_login_ip=ip_address,
                updated_at=at,
            )
            .returning(AppUserModel)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(statement)
        model = result.scalar_one_or_none()
        return self.mapper.to_domain(model) if model else None

    async def bind_hwid(self, user_id: str, hwid: str) -> str | None:
        # 只在尚未绑定时写入，并发的首次登录只有一个能成功绑定
        statement = (
            update(AppUserModel)
            .where(col(AppUserModel.id) == user_id, col(AppUserModel.hwid).is_(None))
            .values(hwid=hwid, updated_at=datetime.now(UTC))
            .returning(col(AppUserModel.hwid))
        )
        result = await self.session.execute(statement)
        bound = result.scalar_one_or_none()
        if bound is not None:
            return bound
        current = await self.session.execute(
            select(AppUserModel.hwid).where(AppUserModel.id == user_id)
        )
        return current.scalar_one_or_none()

    async def delete_by_application(self, application_id: str) -> int:
        result = await self.session.execute(
            delete(AppUserModel).where(
                col(AppUserModel.application_id) == application_id
            )
        )
        return result.rowcount or 0


class PostgreSQLActiveSessionRepository(ActiveSessionRepository):
    """PostgreSQL active session repository implementation."""

    def __init__(self, session: AsyncSession, mapper: ActiveSessionMapper):
        self.session = session
        self.mapper = mapper

    async def get_by_id(self, session_id: str) -> ActiveSession | None:
        result = await self.session.execute(
            select(ActiveSessionModel).where(ActiveSessionModel.id == session_id)
        )
        model = result.scalar_one_or_none()
        return self.mapper.to_domain(model) if model else None

    async def get_by_token(self, session_token: str) -> ActiveSession | None:
        result = await self.session.execute(
            select(ActiveSessionModel).where(
                ActiveSessionModel.session_token == session_token
            )
        )
        model = result.scalar_one_or_none()
        return self.mapper.to_domain(model) if model else None

    async def create(self, active_session: ActiveSession) -> ActiveSession:
        model = self.mapper.to_model(active_session)
        try:
            async with self.session.begin_nested():
                self.session.add(model)
                await self.session.flush()
        except IntegrityError as e:
            raise SessionTokenConflictError(active_session.session_token) from e
        return self.mapper.to_domain(model)

    async def update(self, active_session: ActiveSession) -> ActiveSession:
        result = await self.session.execute(
            select(ActiveSessionModel).where(
                ActiveSessionModel.id == active_session.id
            )
        )
        existing = result.scalar_one_or_none()
        if not existing:
            raise EntityNotFoundError("ActiveSession", active_session.id)
        self.mapper.copy_to_model(active_session, existing)
        self.session.add(existing)
        await self.session.flush()
        return self.mapper.to_domain(existing)

    async def delete(self, active_session: ActiveSession | str) -> bool:
        session_id = (
            active_session.id
            if isinstance(active_session, ActiveSession)
            else active_session
        )
        result = await self.session.execute(
            delete(ActiveSessionModel).where(col(ActiveSessionModel.id) == session_id)
        )
        return bool(result.rowcount)

    async def list_active_by_application(
        self, application_id: str
    ) -> list[ActiveSession]:
        statement = (
            select(ActiveSessionModel)
            .where(
                ActiveSessionModel.application_id == application_id,
                col(ActiveSessionModel.is_active).is_(True),
            )
            .order_by(col(ActiveSessionModel.last_activity).desc())
        )
        result = await self.session.execute(statement)
        return self.mapper.to_domain_list(list(result.scalars().all()))

    async def _flip(
        self, application_id: str, app_user_id: str, session_token: str, **values
    ) -> bool:
        # 会话只能由其所属用户刷新或结束
        statement = (
            update(ActiveSessionModel)
            .where(
                col(ActiveSessionModel.application_id) == application_id,
                col(ActiveSessionModel.app_user_id) == app_user_id,
                col(ActiveSessionModel.session_token) == session_token,
                col(ActiveSessionModel.is_active).is_(True),
            )
            .values(**values)
            .returning(col(ActiveSessionModel.id))
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none() is not None

    async def touch(
        self, application_id: str, app_user_id: str, session_token: str, at: datetime
    ) -> bool:
        return await self._flip(
            application_id, app_user_id, session_token, last_activity=at, updated_at=at
        )

    async def end(
        self, application_id: str, app_user_id: str, session_token: str, at: datetime
    ) -> bool:
        return await self._flip(
            application_id,
            app_user_id,
            session_token,
            is_active=False,
            last_activity=at,
            updated_at=at,
        )

    async def delete_by_application(self, application_id: str) -> int:
        result = await self.session.execute(
            delete(ActiveSessionModel).where(
                col(ActiveSessionModel.application_id) == application_id
            )
        )
        return result.rowcount or 0
