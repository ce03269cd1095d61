"""Read-only account re-check for already-authenticated clients."""

from fastapi import status

from src.core.domain.base_entity import utc_now
from src.modules.app_users.application.outcomes import AuthOutcome, iso_or_none
from src.modules.app_users.domain.repository import AppUserRepository
from src.modules.applications.domain.entities import Application


class VerificationService:
    """Re-checks active, paused and expiry state. No password, no side effects."""

    def __init__(self, users: AppUserRepository):
        self.users = users

    async def verify(self, application: Application, user_id: str | None) -> AuthOutcome:
        if not user_id:
            return AuthOutcome(status.HTTP_400_BAD_REQUEST, False, "User ID required")

        user = await self.users.get_by_id(user_id)
        if user is None or user.application_id != application.id:
            return AuthOutcome(status.HTTP_404_NOT_FOUND, False, "User not found")
        if not user.is_active:
            return AuthOutcome(
                status.HTTP_401_UNAUTHORIZED, False, "Account is disabled"
            )
        if user.is_paused:
            return AuthOutcome(
                status.HTTP_401_UNAUTHORIZED, False, "Account is temporarily paused"
            )
        if user.is_expired(utc_now()):
            return AuthOutcome(
                status.HTTP_401_UNAUTHORIZED, False, "Account has expired"
            )

        return AuthOutcome(
            status.HTTP_200_OK,
            True,
            "User verified",
            body={
                "user_id": user.id,
                "username": user.username,
                "email": user.email,
                "expires_at": iso_or_none(user.expires_at),
            },
        )
