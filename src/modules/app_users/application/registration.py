"""License-gated registration pipeline."""

from fastapi import status
from loguru import logger

from src.core.domain.base_entity import utc_now
from src.core.domain.ports.password_hasher import PasswordHasher
from src.core.domain.request_context import RequestContext
from src.core.infrastructure.logging import BusinessEvents
from src.modules.app_users.application.commands import RegisterCommand
from src.modules.app_users.application.outcomes import AuthOutcome, iso_or_none
from src.modules.app_users.domain.entities import AppUser
from src.modules.app_users.domain.exceptions import AppUserConflictError
from src.modules.app_users.domain.repository import AppUserRepository
from src.modules.applications.domain.entities import Application
from src.modules.licenses.application.service import LicenseRegistry
from src.modules.notifications.application.service import dispatch_notification
from src.modules.notifications.domain.entities import (
    NotificationRequest,
    WebhookEvent,
)
from src.modules.notifications.domain.ports import Notifier

REQUIRED_FIELDS_MESSAGE = "Username, password, and license key are required"
INVALID_LICENSE_MESSAGE = "Invalid or expired license key"
LICENSE_FULL_MESSAGE = "License key has reached maximum user limit"
USERNAME_TAKEN_MESSAGE = "Username already exists"
EMAIL_TAKEN_MESSAGE = "Email already exists"
SUCCESS_MESSAGE = "Registration successful! You can now login with your credentials."


def _rejected(message: str) -> AuthOutcome:
    return AuthOutcome(status.HTTP_400_BAD_REQUEST, False, message)


class RegistrationPipeline:
    """Validates and consumes a license key to create an app user.

    Failures return 400 and are not notified.
    """

    def __init__(
        self,
        licenses: LicenseRegistry,
        users: AppUserRepository,
        password_hasher: PasswordHasher,
        notifier: Notifier,
    ):
        self.licenses = licenses
        self.users = users
        self.password_hasher = password_hasher
        self.notifier = notifier

    async def register(
        self,
        application: Application,
        command: RegisterCommand,
        context: RequestContext,
    ) -> AuthOutcome:
        if not command.username or not command.password or not command.license_key:
            return _rejected(REQUIRED_FIELDS_MESSAGE)

        license_key = await self.licenses.validate(command.license_key, application.id)
        if license_key is None:
            return _rejected(INVALID_LICENSE_MESSAGE)

        if await self.users.get_by_username(application.id, command.username):
            return _rejected(USERNAME_TAKEN_MESSAGE)
        if command.email and await self.users.get_by_email(
            application.id, command.email
        ):
            return _rejected(EMAIL_TAKEN_MESSAGE)

        password_hash = await self.password_hasher.hash(command.password)

        # 名额占用与用户创建视为一个整体：创建失败时归还名额
        if not await self.licenses.consume(license_key.id):
            return _rejected(LICENSE_FULL_MESSAGE)
        try:
            user = await self.users.create(
                AppUser(
                    application_id=application.id,
                    license_key_id=license_key.id,
                    username=command.username,
                    password_hash=password_hash,
                    email=command.email or None,
                    hwid=command.hwid or None,
                    expires_at=license_key.expires_at,
                )
            )
        except AppUserConflictError as e:
            await self.licenses.release(license_key.id)
            logger.info(f"Registration lost a uniqueness race: {e.message}")
            return _rejected(
                EMAIL_TAKEN_MESSAGE if e.field == "email" else USERNAME_TAKEN_MESSAGE
            )
        except Exception:
            await self.licenses.release(license_key.id)
            raise

        BusinessEvents.user_registered(
            application_id=application.id,
            user_id=user.id,
            license_key_id=license_key.id,
        )
        dispatch_notification(
            self.notifier,
            NotificationRequest(
                owner_id=application.owner_id,
                application_id=application.id,
                event=WebhookEvent.USER_REGISTER,
                success=True,
                user=user.snapshot(),
                metadata={
                    "registration_time": utc_now().isoformat(),
                    "license_key": license_key.license_key,
                    "version": command.version,
                },
                ip_address=context.ip_address,
                hwid=command.hwid,
                user_agent=context.user_agent,
            ),
        )
        return AuthOutcome(
            status.HTTP_201_CREATED,
            True,
            SUCCESS_MESSAGE,
            WebhookEvent.USER_REGISTER,
            {
                "user_id": user.id,
                "username": user.username,
                "email": user.email,
                "expires_at": iso_or_none(user.expires_at),
            },
        )
