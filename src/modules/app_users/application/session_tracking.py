"""Client session tracking (start / heartbeat / end)."""

from fastapi import status

from src.core.domain.base_entity import utc_now
from src.core.domain.request_context import RequestContext
from src.modules.app_users.application.commands import (
    SessionAction,
    TrackSessionCommand,
)
from src.modules.app_users.application.outcomes import AuthOutcome
from src.modules.app_users.domain.entities import ActiveSession, AppUser
from src.modules.app_users.domain.exceptions import SessionTokenConflictError
from src.modules.app_users.domain.repository import (
    ActiveSessionRepository,
    AppUserRepository,
)
from src.modules.applications.domain.entities import Application
from src.modules.notifications.application.service import dispatch_notification
from src.modules.notifications.domain.entities import (
    NotificationRequest,
    WebhookEvent,
)
from src.modules.notifications.domain.ports import Notifier

INVALID_ACTION_MESSAGE = "Invalid action or missing session_token"


class SessionTrackingService:
    def __init__(
        self,
        users: AppUserRepository,
        sessions: ActiveSessionRepository,
        notifier: Notifier,
    ):
        self.users = users
        self.sessions = sessions
        self.notifier = notifier

    async def track(
        self,
        application: Application,
        command: TrackSessionCommand,
        context: RequestContext,
    ) -> AuthOutcome:
        if not command.user_id:
            return AuthOutcome(status.HTTP_400_BAD_REQUEST, False, "User ID required")

        user = await self.users.get_by_id(command.user_id)
        if user is None or user.application_id != application.id:
            return AuthOutcome(status.HTTP_404_NOT_FOUND, False, "User not found")

        token = command.session_token
        if not token or command.action not in {a.value for a in SessionAction}:
            return AuthOutcome(
                status.HTTP_400_BAD_REQUEST, False, INVALID_ACTION_MESSAGE
            )

        action = SessionAction(command.action)
        if action is SessionAction.START:
            return await self._start(application, user, token, context)
        if action is SessionAction.HEARTBEAT:
            updated = await self.sessions.touch(
                application.id, user.id, token, utc_now()
            )
            return AuthOutcome(
                status.HTTP_200_OK,
                updated,
                "Session updated" if updated else "Session not found",
            )
        return await self._end(application, user, token, context)

    async def _start(
        self,
        application: Application,
        user: AppUser,
        token: str,
        context: RequestContext,
    ) -> AuthOutcome:
        now = utc_now()
        try:
            await self.sessions.create(
                ActiveSession(
                    application_id=application.id,
                    app_user_id=user.id,
                    session_token=token,
                    last_activity=now,
                    ip_address=context.ip_address,
                    user_agent=context.user_agent,
                )
            )
        except SessionTokenConflictError:
            return AuthOutcome(
                status.HTTP_409_CONFLICT, False, "Session token already in use"
            )

        self._notify(
            application,
            user,
            WebhookEvent.SESSION_START,
            context,
            {"session_token": token, "session_start_time": now.isoformat()},
        )
        return AuthOutcome(
            status.HTTP_200_OK,
            True,
            "Session started",
            WebhookEvent.SESSION_START,
            {"session_token": token},
        )

    async def _end(
        self,
        application: Application,
        user: AppUser,
        token: str,
        context: RequestContext,
    ) -> AuthOutcome:
        now = utc_now()
        ended = await self.sessions.end(application.id, user.id, token, now)
        if not ended:
            return AuthOutcome(status.HTTP_200_OK, False, "Session not found")

        self._notify(
            application,
            user,
            WebhookEvent.SESSION_END,
            context,
            {"session_token": token, "session_end_time": now.isoformat()},
        )
        return AuthOutcome(
            status.HTTP_200_OK, True, "Session ended", WebhookEvent.SESSION_END
        )

    def _notify(
        self,
        application: Application,
        user: AppUser,
        event: WebhookEvent,
        context: RequestContext,
        metadata: dict[str, str],
    ) -> None:
        dispatch_notification(
            self.notifier,
            NotificationRequest(
                owner_id=application.owner_id,
                application_id=application.id,
                event=event,
                success=True,
                user=user.snapshot(),
                metadata=metadata,
                ip_address=context.ip_address,
                user_agent=context.user_agent,
            ),
        )
