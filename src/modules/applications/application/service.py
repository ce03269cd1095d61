"""Application service: tenant resolution and owner management."""

import hmac
import secrets
from collections.abc import Sequence

from loguru import logger

from src.core.config import settings
from src.core.infrastructure.logging import BusinessEvents
from src.modules.applications.application.commands import (
    CreateApplicationCommand,
    UpdateApplicationCommand,
)
from src.modules.applications.domain.entities import Application
from src.modules.applications.domain.exceptions import (
    ApplicationAccessDeniedError,
    ApplicationNotFoundError,
)
from src.modules.applications.domain.repository import (
    ApplicationRepository,
    ApplicationScopedData,
)

_MAX_KEY_ATTEMPTS = 5


def generate_api_key() -> str:
    random_part = secrets.token_urlsafe(settings.APPLICATION_API_KEY_BYTES)
    return f"{settings.APPLICATION_API_KEY_PREFIX}_{random_part}"


class ApplicationService:
    """Application service."""

    def __init__(
        self,
        repository: ApplicationRepository,
        scoped_data: Sequence[ApplicationScopedData] = (),
    ) -> None:
        self._repo = repository
        self._scoped_data = scoped_data

    async def resolve_api_key(self, raw_key: str) -> Application | None:
        """Resolve an API key to an active application.

        Returns None for unknown keys and inactive or deleted applications.
        """
        application = await self._repo.get_by_api_key(raw_key)
        if application is None or not hmac.compare_digest(
            application.api_key, raw_key
        ):
            return None
        if not application.is_active or application.is_deleted:
            return None
        return application

    async def create(
        self, owner_id: str, command: CreateApplicationCommand
    ) -> Application:
        api_key = await self._unique_api_key()
        application = Application(
            owner_id=owner_id,
            api_key=api_key,
            **command.model_dump(),
        )
        created = await self._repo.create(application)
        BusinessEvents.log_event(
            "application_created",
            user_id=owner_id,
            event_data={"application_id": created.id, "name": created.name},
        )
        return created

    async def _unique_api_key(self) -> str:
        for _ in range(_MAX_KEY_ATTEMPTS):
            candidate = generate_api_key()
            if await self._repo.get_by_api_key(candidate) is None:
                return candidate
            logger.warning("API key collision, regenerating")
        raise RuntimeError("Could not generate a unique API key")

    async def get_owned(self, owner_id: str, application_id: str) -> Application:
        """Load an application and check that ``owner_id`` owns it.

        Raises:
            ApplicationNotFoundError: unknown or deleted application
            ApplicationAccessDeniedError: owned by someone else
        """
        application = await self._repo.get_by_id(application_id)
        if application is None or application.is_deleted:
            raise ApplicationNotFoundError(application_id)
        if not application.is_owned_by(owner_id):
            raise ApplicationAccessDeniedError()
        return application

    async def list_owned(self, owner_id: str) -> list[Application]:
        return await self._repo.list_by_owner(owner_id)

    async def update(
        self,
        owner_id: str,
        application_id: str,
        command: UpdateApplicationCommand,
    ) -> Application:
        application = await self.get_owned(owner_id, application_id)
        application.apply_changes(command.model_dump(exclude_unset=True))
        return await self._repo.update(application)

    async def delete(self, owner_id: str, application_id: str) -> None:
        """Soft-delete the application and purge everything scoped to it."""
        application = await self.get_owned(owner_id, application_id)
        purged = 0
        for store in self._scoped_data:
            purged += await store.delete_by_application(application.id)
        await self._repo.delete(application)
        BusinessEvents.log_event(
            "application_deleted",
            user_id=owner_id,
            event_data={"application_id": application.id, "purged_rows": purged},
        )
