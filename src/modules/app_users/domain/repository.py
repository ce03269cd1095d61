"""App user repository interfaces."""

from abc import abstractmethod
from datetime import datetime

from src.core.domain.repository import BaseRepository
from src.modules.app_users.domain.entities import ActiveSession, AppUser


class AppUserRepository(BaseRepository[AppUser]):
    """App user repository interface.

    ``create`` raises ``AppUserConflictError`` when the username or email is
    already taken in the application. ``delete`` removes the row permanently.
    """

    @abstractmethod
    async def get_by_username(
        self, application_id: str, username: str
    ) -> AppUser | None:
        pass

    @abstractmethod
    async def get_by_email(self, application_id: str, email: str) -> AppUser | None:
        pass

    @abstractmethod
    async def list_by_application(self, application_id: str) -> list[AppUser]:
        pass

    @abstractmethod
    async def record_failed_attempt(self, user_id: str, at: datetime) -> int:
        """Atomically increment ``login_attempts``; return the new count."""
        pass

    @abstractmethod
    async def record_successful_login(
        self, user_id: str, at: datetime, ip_address: str | None
    ) -> AppUser | None:
        """Reset ``login_attempts`` and stamp the last login in one statement."""
        pass

    @abstractmethod
    async def bind_hwid(self, user_id: str, hwid: str) -> str | None:
        """Set the HWID only if none is bound yet; return the bound value."""
        pass

    @abstractmethod
    async def delete_by_application(self, application_id: str) -> int:
        pass


class ActiveSessionRepository(BaseRepository[ActiveSession]):
    """Active session repository interface."""

    @abstractmethod
    async def get_by_token(self, session_token: str) -> ActiveSession | None:
        pass

    @abstractmethod
    async def list_active_by_application(
        self, application_id: str
    ) -> list[ActiveSession]:
        """Active sessions of the application, most recent activity first."""
        pass

    @abstractmethod
    async def touch(
        self, application_id: str, app_user_id: str, session_token: str, at: datetime
    ) -> bool:
        """Refresh ``last_activity`` of an active session owned by the user."""
        pass

    @abstractmethod
    async def end(
        self, application_id: str, app_user_id: str, session_token: str, at: datetime
    ) -> bool:
        """Flip an active session owned by the user to inactive."""
        pass

    @abstractmethod
    async def delete_by_application(self, application_id: str) -> int:
        pass
