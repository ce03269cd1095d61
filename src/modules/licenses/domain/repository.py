"""License key repository interfaces."""

from abc import abstractmethod
from datetime import datetime

from src.core.domain.repository import BaseRepository
from src.modules.licenses.domain.entities import LicenseKey


class LicenseKeyRepository(BaseRepository[LicenseKey]):
    """License key repository interface."""

    @abstractmethod
    async def get_by_key(self, license_key: str) -> LicenseKey | None:
        pass

    @abstractmethod
    async def list_by_application(self, application_id: str) -> list[LicenseKey]:
        pass

    @abstractmethod
    async def try_consume(self, license_key_id: str, now: datetime) -> LicenseKey | None:
        """Atomically take one slot.

        Increments ``current_users`` only while the key is active, unexpired
        at ``now`` and below ``max_users``. Returns the updated key, or None
        when no slot was taken.
        """
        pass

    @abstractmethod
    async def release(self, license_key_id: str) -> LicenseKey | None:
        """Atomically give one slot back, floored at zero."""
        pass

    @abstractmethod
    async def delete_by_application(self, application_id: str) -> int:
        pass
