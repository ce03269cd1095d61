"""License registry.

校验（validate）是纯读操作；名额占用（consume）由存储层的条件更新原子完成，
避免两个并发注册同时通过校验后超出 max_users。
"""

import re
import secrets
import string
from datetime import UTC, datetime, timedelta

from src.core.config import settings
from src.core.infrastructure.logging import BusinessEvents
from src.modules.licenses.application.commands import CreateLicenseKeyCommand
from src.modules.licenses.domain.entities import LicenseKey
from src.modules.licenses.domain.exceptions import (
    DuplicateLicenseKeyError,
    LicenseExpiryRequiredError,
    LicenseKeyNotFoundError,
)
from src.modules.licenses.domain.repository import LicenseKeyRepository

_KEY_ALPHABET = string.ascii_letters + string.digits + "_-"
_MAX_KEY_ATTEMPTS = 5


def generate_license_key(application_name: str) -> str:
    """Build ``PREFIX-xxxxxxxx-xxxxxxxx-xxxxxxxx``.

    PREFIX is the first four alphanumerics of the application name, upper-cased.
    """
    prefix = re.sub(r"[^A-Z0-9]", "", application_name.upper())[:4] or "KEY"
    length = settings.LICENSE_KEY_SEGMENT_LENGTH
    segments = [
        "".join(secrets.choice(_KEY_ALPHABET) for _ in range(length))
        for _ in range(3)
    ]
    return "-".join([prefix, *segments])


class LicenseRegistry:
    """Creates, validates and tracks consumption of license keys."""

    def __init__(self, repository: LicenseKeyRepository) -> None:
        self._repo = repository

    async def create(
        self,
        application_id: str,
        application_name: str,
        command: CreateLicenseKeyCommand,
    ) -> LicenseKey:
        """Create a license key.

        Raises:
            LicenseExpiryRequiredError: neither ``validity_days`` nor ``expires_at``
            DuplicateLicenseKeyError: caller-supplied key already exists
        """
        now = datetime.now(UTC)
        if command.expires_at is not None:
            expires_at = command.expires_at
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=UTC)
        elif command.validity_days is not None:
            expires_at = now + timedelta(days=command.validity_days)
        else:
            raise LicenseExpiryRequiredError()

        if command.license_key:
            key_string = command.license_key
            if await self._repo.get_by_key(key_string) is not None:
                raise DuplicateLicenseKeyError(key_string)
        else:
            key_string = await self._unique_key(application_name)

        license_key = LicenseKey(
            application_id=application_id,
            license_key=key_string,
            max_users=command.max_users,
            validity_days=command.validity_days,
            expires_at=expires_at,
            description=command.description,
        )
        return await self._repo.create(license_key)

    async def _unique_key(self, application_name: str) -> str:
        for _ in range(_MAX_KEY_ATTEMPTS):
            candidate = generate_license_key(application_name)
            if await self._repo.get_by_key(candidate) is None:
                return candidate
        raise RuntimeError("Could not generate a unique license key")

    def generate_key(self, application_name: str) -> str:
        """Preview a key string without persisting it."""
        return generate_license_key(application_name)

    async def validate(
        self, license_key: str, application_id: str
    ) -> LicenseKey | None:
        """Pure read. None when unknown, foreign, inactive, expired or full."""
        if not license_key:
            return None
        found = await self._repo.get_by_key(license_key)
        if found is None or found.application_id != application_id:
            return None
        if not found.is_valid():
            return None
        return found

    async def consume(self, license_key_id: str) -> bool:
        """Take one slot; False when the key was full, expired or inactive."""
        consumed = await self._repo.try_consume(license_key_id, datetime.now(UTC))
        if consumed is None:
            return False
        BusinessEvents.license_consumed(
            license_key_id=consumed.id,
            current_users=consumed.current_users,
            max_users=consumed.max_users,
        )
        return True

    async def release(self, license_key_id: str) -> bool:
        """Give one slot back, never going below zero."""
        return await self._repo.release(license_key_id) is not None

    async def list_for_application(self, application_id: str) -> list[LicenseKey]:
        return await self._repo.list_by_application(application_id)

    async def delete(self, application_id: str, license_key_id: str) -> None:
        license_key = await self._repo.get_by_id(license_key_id)
        if license_key is None or license_key.application_id != application_id:
            raise LicenseKeyNotFoundError(license_key_id)
        await self._repo.delete(license_key)
