"""Credential store port."""

from typing import Protocol


class PasswordHasher(Protocol):
    """Adaptive one-way password hashing.

    ``verify`` must never raise on a malformed hash; it returns ``False``.
    """

    async def hash(self, password: str) -> str: ...

    async def verify(self, password: str, password_hash: str) -> bool: ...
