"""App users module application dependencies."""

from typing import NoReturn

from fastapi import Depends

from src.core.application.dependencies import get_password_hasher
from src.core.domain.ports.password_hasher import PasswordHasher
from src.modules.app_users.application.authorization import AuthorizationPipeline
from src.modules.app_users.application.management import AppUserService
from src.modules.app_users.application.monitoring import (
    ApplicationMonitoringService,
)
from src.modules.app_users.application.registration import RegistrationPipeline
from src.modules.app_users.application.session_tracking import (
    SessionTrackingService,
)
from src.modules.app_users.application.verification import VerificationService
from src.modules.app_users.domain.repository import (
    ActiveSessionRepository,
    AppUserRepository,
)
from src.modules.blacklist.application.dependencies import get_blacklist_checker
from src.modules.blacklist.application.service import BlacklistChecker
from src.modules.licenses.application.dependencies import get_license_registry
from src.modules.licenses.application.service import LicenseRegistry
from src.modules.notifications.application.dependencies import (
    get_activity_log_repository,
    get_notifier,
)
from src.modules.notifications.domain.ports import Notifier
from src.modules.notifications.domain.repository import ActivityLogRepository


def _missing_dependency(name: str) -> NoReturn:
    raise RuntimeError(f"Missing dependency override for {name}")


async def get_app_user_repository() -> AppUserRepository:
    _missing_dependency("AppUserRepository")


async def get_active_session_repository() -> ActiveSessionRepository:
    _missing_dependency("ActiveSessionRepository")


async def get_authorization_pipeline(
    blacklist: BlacklistChecker = Depends(get_blacklist_checker),
    users: AppUserRepository = Depends(get_app_user_repository),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
    notifier: Notifier = Depends(get_notifier),
) -> AuthorizationPipeline:
    return AuthorizationPipeline(blacklist, users, password_hasher, notifier)


async def get_registration_pipeline(
    licenses: LicenseRegistry = Depends(get_license_registry),
    users: AppUserRepository = Depends(get_app_user_repository),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
    notifier: Notifier = Depends(get_notifier),
) -> RegistrationPipeline:
    return RegistrationPipeline(licenses, users, password_hasher, notifier)


async def get_verification_service(
    users: AppUserRepository = Depends(get_app_user_repository),
) -> VerificationService:
    return VerificationService(users)


async def get_session_tracking_service(
    users: AppUserRepository = Depends(get_app_user_repository),
    sessions: ActiveSessionRepository = Depends(get_active_session_repository),
    notifier: Notifier = Depends(get_notifier),
) -> SessionTrackingService:
    return SessionTrackingService(users, sessions, notifier)


async def get_app_user_service(
    users: AppUserRepository = Depends(get_app_user_repository),
    licenses: LicenseRegistry = Depends(get_license_registry),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
) -> AppUserService:
    return AppUserService(users, licenses, password_hasher)


async def get_application_monitoring_service(
    users: AppUserRepository = Depends(get_app_user_repository),
    sessions: ActiveSessionRepository = Depends(get_active_session_repository),
    activity_logs: ActivityLogRepository = Depends(get_activity_log_repository),
) -> ApplicationMonitoringService:
    return ApplicationMonitoringService(users, sessions, activity_logs)
