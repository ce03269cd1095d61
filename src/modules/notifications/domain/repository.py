"""Notification repository interfaces."""

from abc import abstractmethod

from src.core.domain.repository import BaseRepository
from src.modules.notifications.domain.entities import (
    ActivityLog,
    Webhook,
    WebhookEvent,
)


class WebhookRepository(BaseRepository[Webhook]):
    """Webhook repository interface."""

    @abstractmethod
    async def list_by_owner(self, owner_id: str) -> list[Webhook]:
        pass

    @abstractmethod
    async def list_subscribed(self, owner_id: str, event: WebhookEvent) -> list[Webhook]:
        """Active webhooks of ``owner_id`` subscribed to ``event``, oldest first."""
        pass


class ActivityLogRepository(BaseRepository[ActivityLog]):
    """Activity log repository interface. Logs are never updated."""

    @abstractmethod
    async def list_by_application(
        self, application_id: str, limit: int = 100
    ) -> list[ActivityLog]:
        pass

    @abstractmethod
    async def list_by_app_user(
        self, app_user_id: str, limit: int = 100
    ) -> list[ActivityLog]:
        pass

    @abstractmethod
    async def delete_by_application(self, application_id: str) -> int:
        pass
