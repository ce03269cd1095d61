"""Core application dependencies.

These functions define application-level dependency boundaries and are overridden
by infrastructure in `main.py`.
"""

from typing import NoReturn

from src.core.domain.ports.password_hasher import PasswordHasher


def _missing_dependency(name: str) -> NoReturn:
    raise RuntimeError(f"Missing dependency override for {name}")


def get_password_hasher() -> PasswordHasher:
    _missing_dependency("PasswordHasher")
