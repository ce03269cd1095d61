"""Login authorization pipeline.

阶段严格按顺序执行，任一阶段终止后不再执行后续阶段：
1-3. IP / 用户名 / HWID 黑名单
4.   客户端版本
5.   用户是否存在
6-8. 启用 / 暂停 / 过期
9.   密码校验
10.  HWID 绑定
11.  成功

除 HWID 缺失（客户端参数错误）外，每个终止阶段恰好发送一次通知。
"""

from typing import Any

from fastapi import status
from loguru import logger

from src.core.domain.base_entity import utc_now
from src.core.domain.ports.password_hasher import PasswordHasher
from src.core.domain.request_context import RequestContext
from src.core.infrastructure.logging import BusinessEvents
from src.modules.app_users.application.commands import LoginCommand
from src.modules.app_users.application.outcomes import AuthOutcome, iso_or_none
from src.modules.app_users.domain.entities import AppUser
from src.modules.app_users.domain.repository import AppUserRepository
from src.modules.applications.domain.entities import Application, MessageTemplate
from src.modules.blacklist.application.service import BlacklistChecker
from src.modules.blacklist.domain.entities import BlacklistType
from src.modules.notifications.application.service import dispatch_notification
from src.modules.notifications.domain.entities import (
    NotificationRequest,
    UserSnapshot,
    WebhookEvent,
)
from src.modules.notifications.domain.ports import Notifier

PAUSED_MESSAGE = "Account is temporarily paused. Contact support."
HWID_REQUIRED_MESSAGE = "Hardware ID is required for this application"
INVALID_REQUEST_MESSAGE = "Invalid request data"

# (类型, 取值字段, 事件, 响应文案中的名称, 日志中的名称)
_BLACKLIST_STAGES = (
    (BlacklistType.IP, "ip", WebhookEvent.LOGIN_BLOCKED_IP, "IP address", "IP"),
    (
        BlacklistType.USERNAME,
        "username",
        WebhookEvent.LOGIN_BLOCKED_USERNAME,
        "Username",
        "Username",
    ),
    (BlacklistType.HWID, "hwid", WebhookEvent.LOGIN_BLOCKED_HWID, "Hardware ID", "HWID"),
)


class AuthorizationPipeline:
    """Evaluates one login attempt and produces a single terminal outcome."""

    def __init__(
        self,
        blacklist: BlacklistChecker,
        users: AppUserRepository,
        password_hasher: PasswordHasher,
        notifier: Notifier,
    ):
        self.blacklist = blacklist
        self.users = users
        self.password_hasher = password_hasher
        self.notifier = notifier

    async def authorize(
        self,
        application: Application,
        command: LoginCommand,
        context: RequestContext,
    ) -> AuthOutcome:
        if not command.username or not command.password:
            outcome = AuthOutcome(
                status.HTTP_400_BAD_REQUEST, False, INVALID_REQUEST_MESSAGE
            )
        else:
            outcome = await self._evaluate(application, command, context)

        BusinessEvents.auth_outcome(
            application_id=application.id,
            event=outcome.event.value if outcome.event else None,
            status_code=outcome.status_code,
            username=command.username or None,
            ip_address=context.ip_address,
            hwid=command.hwid,
        )
        return outcome

    async def _evaluate(
        self,
        application: Application,
        command: LoginCommand,
        context: RequestContext,
    ) -> AuthOutcome:
        values = {
            "ip": context.ip_address,
            "username": command.username,
            "hwid": command.hwid,
        }
        for entry_type, key, event, label, short_label in _BLACKLIST_STAGES:
            entry = await self.blacklist.check(
                application.id, entry_type, values[key], owner_id=application.owner_id
            )
            if entry is not None:
                return self._terminate(
                    application,
                    command,
                    context,
                    event=event,
                    status_code=status.HTTP_403_FORBIDDEN,
                    message=f"Access denied: {label} is blacklisted",
                    error_message=(
                        f"Login blocked: {short_label} {values[key]} is blacklisted"
                        f" - {entry.reason or 'No reason provided'}"
                    ),
                    metadata={"blacklist_entry_id": entry.id, "reason": entry.reason},
                )

        if application.requires_version(command.version):
            return self._terminate(
                application,
                command,
                context,
                event=WebhookEvent.VERSION_MISMATCH,
                status_code=status.HTTP_400_BAD_REQUEST,
                message=application.message(MessageTemplate.VERSION_MISMATCH),
                error_message=(
                    f"Version mismatch: Required {application.version}, "
                    f"provided {command.version}"
                ),
                metadata={
                    "required_version": application.version,
                    "current_version": command.version,
                },
                body={
                    "required_version": application.version,
                    "current_version": command.version,
                },
            )

        user = await self.users.get_by_username(application.id, command.username)
        if user is None:
            # 与密码错误返回相同文案，不暴露用户是否存在
            return self._terminate(
                application,
                command,
                context,
                event=WebhookEvent.LOGIN_FAILED,
                status_code=status.HTTP_401_UNAUTHORIZED,
                message=application.message(MessageTemplate.LOGIN_FAILED),
                error_message="User not found",
                metadata={
                    "reason": "non_existent_user",
                    "attempt_time": utc_now().isoformat(),
                },
            )

        if not user.is_active:
            return self._terminate(
                application,
                command,
                context,
                user=user,
                event=WebhookEvent.ACCOUNT_DISABLED,
                status_code=status.HTTP_401_UNAUTHORIZED,
                message=application.message(MessageTemplate.ACCOUNT_DISABLED),
                error_message="Account is disabled",
                metadata={"reason": "disabled"},
            )

        if user.is_paused:
            return self._terminate(
                application,
                command,
                context,
                user=user,
                event=WebhookEvent.ACCOUNT_DISABLED,
                status_code=status.HTTP_401_UNAUTHORIZED,
                message=PAUSED_MESSAGE,
                error_message="Account is temporarily paused",
                metadata={"reason": "paused"},
            )

        now = utc_now()
        if user.is_expired(now):
            return self._terminate(
                application,
                command,
                context,
                user=user,
                event=WebhookEvent.ACCOUNT_EXPIRED,
                status_code=status.HTTP_401_UNAUTHORIZED,
                message=application.message(MessageTemplate.ACCOUNT_EXPIRED),
                error_message="Account has expired",
                metadata={"expired_at": iso_or_none(user.expires_at)},
            )

        if not await self.password_hasher.verify(command.password, user.password_hash):
            attempts = await self.users.record_failed_attempt(user.id, now)
            return self._terminate(
                application,
                command,
                context,
                user=user,
                event=WebhookEvent.LOGIN_FAILED,
                status_code=status.HTTP_401_UNAUTHORIZED,
                message=application.message(MessageTemplate.LOGIN_FAILED),
                error_message="Invalid password provided",
                metadata={
                    "reason": "invalid_password",
                    "login_attempts": attempts,
                    "attempt_time": now.isoformat(),
                },
            )

        bound_hwid = user.hwid
        if application.hwid_lock_enabled:
            if not command.hwid:
                return AuthOutcome(
                    status.HTTP_400_BAD_REQUEST, False, HWID_REQUIRED_MESSAGE
                )
            if bound_hwid is None:
                bound_hwid = await self.users.bind_hwid(user.id, command.hwid)
                if bound_hwid == command.hwid:
                    logger.info(f"Bound HWID for app user {user.id} on first login")
            if bound_hwid != command.hwid:
                return self._terminate(
                    application,
                    command,
                    context,
                    user=user,
                    event=WebhookEvent.HWID_MISMATCH,
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    message=application.message(MessageTemplate.HWID_MISMATCH),
                    error_message=(
                        f"HWID mismatch: Expected {bound_hwid}, got {command.hwid}"
                    ),
                    metadata={
                        "expected_hwid": bound_hwid,
                        "provided_hwid": command.hwid,
                    },
                )

        await self.users.record_successful_login(user.id, now, context.ip_address)
        hwid_locked = application.hwid_lock_enabled and bool(bound_hwid)
        return self._terminate(
            application,
            command,
            context,
            user=user,
            event=WebhookEvent.USER_LOGIN,
            status_code=status.HTTP_200_OK,
            success=True,
            message=application.message(MessageTemplate.LOGIN_SUCCESS),
            metadata={
                "login_time": now.isoformat(),
                "version": command.version,
                "hwid_locked": hwid_locked,
            },
            body={
                "user_id": user.id,
                "username": user.username,
                "email": user.email,
                "expires_at": iso_or_none(user.expires_at),
                "hwid_locked": hwid_locked,
            },
        )

    def _terminate(
        self,
        application: Application,
        command: LoginCommand,
        context: RequestContext,
        *,
        event: WebhookEvent,
        status_code: int,
        message: str,
        user: AppUser | None = None,
        success: bool = False,
        error_message: str | None = None,
        metadata: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> AuthOutcome:
        snapshot = user.snapshot() if user else UserSnapshot(username=command.username)
        request = NotificationRequest(
            owner_id=application.owner_id,
            application_id=application.id,
            event=event,
            success=success,
            user=snapshot,
            error_message=error_message,
            metadata=metadata,
            ip_address=context.ip_address,
            hwid=command.hwid,
            user_agent=context.user_agent,
        )
        dispatch_notification(self.notifier, request)
        return AuthOutcome(status_code, success, message, event, body or {})
