"""bcrypt-backed credential store."""

import asyncio

import bcrypt
from loguru import logger

from src.core.config import settings

# bcrypt 只使用前 72 字节
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class BcryptPasswordHasher:
    """Hash and verify passwords with bcrypt.

    bcrypt 是 CPU 密集型操作，放到线程池执行，避免阻塞事件循环。
    """

    def __init__(self, rounds: int | None = None) -> None:
        self.rounds = rounds or settings.PASSWORD_HASH_ROUNDS

    def hash_sync(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_encode(password), salt).decode("utf-8")

    def verify_sync(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
        except (ValueError, TypeError) as e:
            logger.warning(f"Rejecting malformed password hash: {e}")
            return False

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(self.hash_sync, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self.verify_sync, password, password_hash)


def get_password_hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher()
