"""Application-level security dependencies.

Defines auth dependencies without importing infrastructure.
The actual implementations are injected via FastAPI dependency_overrides in main.py.
"""

from typing import NoReturn


def _missing_dependency(name: str) -> NoReturn:
    raise RuntimeError(f"Missing dependency override for {name}")


async def get_current_owner_id() -> str:
    """Get the account id of the dashboard owner making the request.

    Owner identity comes from the external dashboard identity provider as a
    JWT bearer token; the subject claim is the owner account id.
    """
    _missing_dependency("get_current_owner_id")
