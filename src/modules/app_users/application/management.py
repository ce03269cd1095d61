"""Owner-side app user management."""

from src.core.domain.ports.password_hasher import PasswordHasher
from src.core.infrastructure.logging import BusinessEvents
from src.modules.app_users.application.commands import (
    CreateAppUserCommand,
    UpdateAppUserCommand,
)
from src.modules.app_users.domain.entities import AppUser
from src.modules.app_users.domain.exceptions import (
    AppUserConflictError,
    AppUserNotFoundError,
)
from src.modules.app_users.domain.repository import AppUserRepository
from src.modules.licenses.application.service import LicenseRegistry


class AppUserService:
    """CRUD plus pause / unpause / HWID reset for an application's users.

    Application ownership is checked by the caller.
    """

    def __init__(
        self,
        users: AppUserRepository,
        licenses: LicenseRegistry,
        password_hasher: PasswordHasher,
    ):
        self.users = users
        self.licenses = licenses
        self.password_hasher = password_hasher

    async def get(self, application_id: str, user_id: str) -> AppUser:
        user = await self.users.get_by_id(user_id)
        if user is None or user.application_id != application_id:
            raise AppUserNotFoundError(user_id)
        return user

    async def list_for_application(self, application_id: str) -> list[AppUser]:
        return await self.users.list_by_application(application_id)

    async def create(
        self, application_id: str, command: CreateAppUserCommand
    ) -> AppUser:
        if await self.users.get_by_username(application_id, command.username):
            raise AppUserConflictError("username", command.username)
        if command.email and await self.users.get_by_email(
            application_id, command.email
        ):
            raise AppUserConflictError("email", command.email)

        user = AppUser(
            application_id=application_id,
            username=command.username,
            password_hash=await self.password_hasher.hash(command.password),
            email=command.email or None,
            hwid=command.hwid or None,
            expires_at=command.expires_at,
            is_active=command.is_active,
        )
        created = await self.users.create(user)
        BusinessEvents.log_event(
            "app_user_created",
            user_id=created.id,
            event_data={"application_id": application_id},
        )
        return created

    async def update(
        self, application_id: str, user_id: str, command: UpdateAppUserCommand
    ) -> AppUser:
        user = await self.get(application_id, user_id)
        changes = command.model_dump(exclude_unset=True)

        if "email" in changes and changes["email"] and changes["email"] != user.email:
            existing = await self.users.get_by_email(application_id, changes["email"])
            if existing and existing.id != user.id:
                raise AppUserConflictError("email", changes["email"])
            user.email = changes["email"]
        elif "email" in changes and not changes["email"]:
            user.email = None
        if changes.get("password"):
            user.password_hash = await self.password_hasher.hash(changes["password"])
        if "expires_at" in changes:
            user.expires_at = changes["expires_at"]
        if changes.get("is_active") is not None:
            user.is_active = changes["is_active"]
        if "hwid" in changes:
            user.hwid = changes["hwid"] or None

        user._update_timestamp()
        return await self.users.update(user)

    async def pause(self, application_id: str, user_id: str) -> AppUser:
        user = await self.get(application_id, user_id)
        user.pause()
        return await self.users.update(user)

    async def unpause(self, application_id: str, user_id: str) -> AppUser:
        user = await self.get(application_id, user_id)
        user.unpause()
        return await self.users.update(user)

    async def reset_hwid(self, application_id: str, user_id: str) -> AppUser:
        user = await self.get(application_id, user_id)
        user.reset_hwid()
        return await self.users.update(user)

    async def delete(self, application_id: str, user_id: str) -> None:
        """Remove the user permanently and give its license slot back."""
        user = await self.get(application_id, user_id)
        await self.users.delete(user)
        if user.license_key_id:
            await self.licenses.release(user.license_key_id)
