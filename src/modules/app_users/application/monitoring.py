"""Owner-side monitoring: active sessions and per-application usage stats."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.modules.app_users.domain.entities import ActiveSession
from src.modules.app_users.domain.repository import (
    ActiveSessionRepository,
    AppUserRepository,
)
from src.modules.applications.domain.entities import Application
from src.modules.notifications.domain.entities import WebhookEvent
from src.modules.notifications.domain.repository import ActivityLogRepository

# 成功率按最近的活动日志计算
RECENT_ACTIVITY_WINDOW = 100

# 登录流水线的全部终态事件
LOGIN_EVENTS = frozenset(
    {
        WebhookEvent.USER_LOGIN,
        WebhookEvent.LOGIN_FAILED,
        WebhookEvent.ACCOUNT_DISABLED,
        WebhookEvent.ACCOUNT_EXPIRED,
        WebhookEvent.VERSION_MISMATCH,
        WebhookEvent.HWID_MISMATCH,
        WebhookEvent.LOGIN_BLOCKED_IP,
        WebhookEvent.LOGIN_BLOCKED_USERNAME,
        WebhookEvent.LOGIN_BLOCKED_HWID,
    }
)


class ApplicationStats(BaseModel):
    """应用实时统计。"""

    total_users: int = Field(..., ge=0, description="用户总数")
    active_users: int = Field(..., ge=0, description="启用且未暂停的用户数")
    active_sessions: int = Field(..., ge=0, description="活跃会话数")
    login_success_rate: int = Field(..., ge=0, le=100, description="近期登录成功率 (%)")
    recent_requests: int = Field(..., ge=0, description="近期活动日志条数")
    last_activity: datetime | None = Field(None, description="最近一次活动时间")
    application_status: str = Field(..., description="online / offline")
    hwid_lock_enabled: bool


class ApplicationMonitoringService:
    """Read-only views over an application's users, sessions and activity.

    Application ownership is checked by the caller.
    """

    def __init__(
        self,
        users: AppUserRepository,
        sessions: ActiveSessionRepository,
        activity_logs: ActivityLogRepository,
    ):
        self.users = users
        self.sessions = sessions
        self.activity_logs = activity_logs

    async def list_active_sessions(self, application_id: str) -> list[ActiveSession]:
        return await self.sessions.list_active_by_application(application_id)

    async def stats(self, application: Application) -> ApplicationStats:
        users = await self.users.list_by_application(application.id)
        sessions = await self.sessions.list_active_by_application(application.id)
        recent = await self.activity_logs.list_by_application(
            application.id, RECENT_ACTIVITY_WINDOW
        )

        logins = [log for log in recent if log.event in LOGIN_EVENTS]
        succeeded = sum(1 for log in logins if log.success)
        # 没有登录记录时视为 100%
        success_rate = round(succeeded * 100 / len(logins)) if logins else 100

        return ApplicationStats(
            total_users=len(users),
            active_users=sum(1 for u in users if u.is_active and not u.is_paused),
            active_sessions=len(sessions),
            login_success_rate=success_rate,
            recent_requests=len(recent),
            last_activity=max((log.created_at for log in recent), default=None),
            application_status="online" if application.is_active else "offline",
            hwid_lock_enabled=application.hwid_lock_enabled,
        )
