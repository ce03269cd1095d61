"""In-memory implementations of the repository interfaces and ports.

单元测试使用，不依赖数据库或网络。
"""

from __future__ import annotations

from datetime import datetime

from src.modules.app_users.domain.entities import ActiveSession, AppUser
from src.modules.app_users.domain.exceptions import (
    AppUserConflictError,
    SessionTokenConflictError,
)
from src.modules.app_users.domain.repository import (
    ActiveSessionRepository,
    AppUserRepository,
)
from src.modules.applications.domain.entities import Application
from src.modules.applications.domain.repository import ApplicationRepository
from src.modules.blacklist.domain.entities import BlacklistEntry, BlacklistType
from src.modules.blacklist.domain.repository import BlacklistRepository
from src.modules.licenses.domain.entities import LicenseKey
from src.modules.licenses.domain.repository import LicenseKeyRepository
from src.modules.notifications.domain.entities import (
    ActivityLog,
    NotificationRequest,
    ProbeResult,
    Webhook,
    WebhookEvent,
    WebhookPayload,
)
from src.modules.notifications.domain.ports import (
    Notifier,
    WebhookDelivery,
    WebhookTargetProbe,
)
from src.modules.notifications.domain.repository import (
    ActivityLogRepository,
    WebhookRepository,
)

OWNER_ID = "owner-123"
API_KEY = "kw_test-api-key-0123456789abcdef"

# ============================================
# Repositories
# ============================================


class InMemoryApplicationRepository(ApplicationRepository):
    def __init__(self) -> None:
        self.applications: dict[str, Application] = {}

    async def get_by_id(self, application_id: str) -> Application | None:
        application = self.applications.get(application_id)
        if application and not application.is_deleted:
            return application
        return None

    async def get_by_api_key(self, api_key: str) -> Application | None:
        for application in self.applications.values():
            if application.api_key == api_key and not application.is_deleted:
                return application
        return None

    async def list_by_owner(self, owner_id: str) -> list[Application]:
        return [
            a
            for a in self.applications.values()
            if a.owner_id == owner_id and not a.is_deleted
        ]

    async def create(self, entity: Application) -> Application:
        self.applications[entity.id] = entity
        return entity

    async def update(self, entity: Application) -> Application:
        self.applications[entity.id] = entity
        return entity

    async def delete(self, entity: Application | str) -> bool:
        application_id = entity.id if isinstance(entity, Application) else entity
        if application_id in self.applications:
            self.applications[application_id].mark_as_deleted()
            return True
        return False


class InMemoryLicenseKeyRepository(LicenseKeyRepository):
    """Counter updates happen without awaiting, so they are atomic on one loop."""

    def __init__(self) -> None:
        self.keys: dict[str, LicenseKey] = {}

    async def get_by_id(self, license_key_id: str) -> LicenseKey | None:
        key = self.keys.get(license_key_id)
        return key if key and not key.is_deleted else None

    async def get_by_key(self, license_key: str) -> LicenseKey | None:
        for key in self.keys.values():
            if key.license_key == license_key and not key.is_deleted:
                return key
        return None

    async def list_by_application(self, application_id: str) -> list[LicenseKey]:
        return [
            k
            for k in self.keys.values()
            if k.application_id == application_id and not k.is_deleted
        ]

    async def try_consume(
        self, license_key_id: str, now: datetime
    ) -> LicenseKey | None:
        key = self.keys.get(license_key_id)
        if key is None or not key.is_valid(now):
            return None
        key.current_users += 1
        return key

    async def release(self, license_key_id: str) -> LicenseKey | None:
        key = self.keys.get(license_key_id)
        if key is None or key.current_users <= 0:
            return None
        key.current_users -= 1
        return key

    async def create(self, entity: LicenseKey) -> LicenseKey:
        self.keys[entity.id] = entity
        return entity

    async def update(self, entity: LicenseKey) -> LicenseKey:
        self.keys[entity.id] = entity
        return entity

    async def delete(self, entity: LicenseKey | str) -> bool:
        key_id = entity.id if isinstance(entity, LicenseKey) else entity
        if key_id in self.keys:
            self.keys[key_id].mark_as_deleted()
            return True
        return False

    async def delete_by_application(self, application_id: str) -> int:
        count = 0
        for key in self.keys.values():
            if key.application_id == application_id and not key.is_deleted:
                key.mark_as_deleted()
                count += 1
        return count


class InMemoryBlacklistRepository(BlacklistRepository):
    def __init__(self) -> None:
        self.entries: dict[str, BlacklistEntry] = {}
        self.lookups: list[tuple[BlacklistType, str]] = []

    async def find_active(
        self,
        application_id: str,
        entry_type: BlacklistType,
        value: str,
        owner_id: str | None = None,
    ) -> BlacklistEntry | None:
        self.lookups.append((entry_type, value))
        for entry in self.entries.values():
            if entry.is_deleted or not entry.is_active:
                continue
            if entry.type != entry_type or entry.value != value:
                continue
            if entry.application_id == application_id:
                return entry
            if entry.is_global and owner_id and entry.created_by == owner_id:
                return entry
        return None

    async def list_visible(
        self, owner_id: str, application_ids: list[str]
    ) -> list[BlacklistEntry]:
        return [
            e
            for e in self.entries.values()
            if not e.is_deleted
            and (
                e.application_id in application_ids
                or (e.is_global and e.created_by == owner_id)
            )
        ]

    async def get_by_id(self, entry_id: str) -> BlacklistEntry | None:
        entry = self.entries.get(entry_id)
        return entry if entry and not entry.is_deleted else None

    async def create(self, entity: BlacklistEntry) -> BlacklistEntry:
        self.entries[entity.id] = entity
        return entity

    async def update(self, entity: BlacklistEntry) -> BlacklistEntry:
        self.entries[entity.id] = entity
        return entity

    async def delete(self, entity: BlacklistEntry | str) -> bool:
        entry_id = entity.id if isinstance(entity, BlacklistEntry) else entity
        if entry_id in self.entries:
            self.entries[entry_id].mark_as_deleted()
            return True
        return False

    async def delete_by_application(self, application_id: str) -> int:
        count = 0
        for entry in self.entries.values():
            if entry.application_id == application_id and not entry.is_deleted:
                entry.mark_as_deleted()
                count += 1
        return count


class InMemoryAppUserRepository(AppUserRepository):
    def __init__(self) -> None:
        self.users: dict[str, AppUser] = {}
        self.fail_next_create: Exception | None = None

    async def get_by_id(self, user_id: str) -> AppUser | None:
        return self.users.get(user_id)

    async def get_by_username(
        self, application_id: str, username: str
    ) -> AppUser | None:
        for user in self.users.values():
            if user.application_id == application_id and user.username == username:
                return user
        return None

    async def get_by_email(self, application_id: str, email: str) -> AppUser | None:
        for user in self.users.values():
            if user.application_id == application_id and user.email == email:
                return user
        return None

    async def list_by_application(self, application_id: str) -> list[AppUser]:
        return [u for u in self.users.values() if u.application_id == application_id]

    async def record_failed_attempt(self, user_id: str, at: datetime) -> int:
        user = self.users[user_id]
        user.login_attempts += 1
        user.last_login_attempt = at
        return user.login_attempts

    async def record_successful_login(
        self, user_id: str, at: datetime, ip_address: str | None
    ) -> AppUser | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        user.login_attempts = 0
        user.last_login = at
        user.last_login_attempt = at
        user.last_login_ip = ip_address
        return user

    async def bind_hwid(self, user_id: str, hwid: str) -> str | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        if user.hwid is None:
            user.hwid = hwid
        return user.hwid

    async def create(self, entity: AppUser) -> AppUser:
        if self.fail_next_create is not None:
            error, self.fail_next_create = self.fail_next_create, None
            raise error
        if await self.get_by_username(entity.application_id, entity.username):
            raise AppUserConflictError("username", entity.username)
        if entity.email and await self.get_by_email(
            entity.application_id, entity.email
        ):
            raise AppUserConflictError("email", entity.email)
        self.users[entity.id] = entity
        return entity

    async def update(self, entity: AppUser) -> AppUser:
        self.users[entity.id] = entity
        return entity

    async def delete(self, entity: AppUser | str) -> bool:
        user_id = entity.id if isinstance(entity, AppUser) else entity
        return self.users.pop(user_id, None) is not None

    async def delete_by_application(self, application_id: str) -> int:
        doomed = [
            uid for uid, u in self.users.items() if u.application_id == application_id
        ]
        for uid in doomed:
            del self.users[uid]
        return len(doomed)


class InMemoryActiveSessionRepository(ActiveSessionRepository):
    def __init__(self) -> None:
        self.sessions: dict[str, ActiveSession] = {}

    async def get_by_id(self, session_id: str) -> ActiveSession | None:
        return self.sessions.get(session_id)

    async def get_by_token(self, session_token: str) -> ActiveSession | None:
        for session in self.sessions.values():
            if session.session_token == session_token:
                return session
        return None

    async def list_active_by_application(
        self, application_id: str
    ) -> list[ActiveSession]:
        found = [
            s
            for s in self.sessions.values()
            if s.application_id == application_id and s.is_active
        ]
        return sorted(found, key=lambda s: s.last_activity, reverse=True)

    def _active(
        self, application_id: str, app_user_id: str, token: str
    ) -> ActiveSession | None:
        for session in self.sessions.values():
            if (
                session.session_token == token
                and session.application_id == application_id
                and session.app_user_id == app_user_id
                and session.is_active
            ):
                return session
        return None

    async def touch(
        self, application_id: str, app_user_id: str, session_token: str, at: datetime
    ) -> bool:
        session = self._active(application_id, app_user_id, session_token)
        if session is None:
            return False
        session.last_activity = at
        return True

    async def end(
        self, application_id: str, app_user_id: str, session_token: str, at: datetime
    ) -> bool:
        session = self._active(application_id, app_user_id, session_token)
        if session is None:
            return False
        session.is_active = False
        session.last_activity = at
        return True

    async def create(self, entity: ActiveSession) -> ActiveSession:
        if await self.get_by_token(entity.session_token):
            raise SessionTokenConflictError(entity.session_token)
        self.sessions[entity.id] = entity
        return entity

    async def update(self, entity: ActiveSession) -> ActiveSession:
        self.sessions[entity.id] = entity
        return entity

    async def delete(self, entity: ActiveSession | str) -> bool:
        session_id = entity.id if isinstance(entity, ActiveSession) else entity
        return self.sessions.pop(session_id, None) is not None

    async def delete_by_application(self, application_id: str) -> int:
        doomed = [
            sid
            for sid, s in self.sessions.items()
            if s.application_id == application_id
        ]
        for sid in doomed:
            del self.sessions[sid]
        return len(doomed)


class InMemoryWebhookRepository(WebhookRepository):
    def __init__(self) -> None:
        self.webhooks: dict[str, Webhook] = {}

    async def get_by_id(self, webhook_id: str) -> Webhook | None:
        webhook = self.webhooks.get(webhook_id)
        return webhook if webhook and not webhook.is_deleted else None

    async def list_by_owner(self, owner_id: str) -> list[Webhook]:
        return [
            w
            for w in self.webhooks.values()
            if w.owner_id == owner_id and not w.is_deleted
        ]

    async def list_subscribed(self, owner_id: str, event: WebhookEvent) -> list[Webhook]:
        return [
            w
            for w in self.webhooks.values()
            if w.owner_id == owner_id and w.subscribes_to(event)
        ]

    async def create(self, entity: Webhook) -> Webhook:
        self.webhooks[entity.id] = entity
        return entity

    async def update(self, entity: Webhook) -> Webhook:
        self.webhooks[entity.id] = entity
        return entity

    async def delete(self, entity: Webhook | str) -> bool:
        webhook_id = entity.id if isinstance(entity, Webhook) else entity
        if webhook_id in self.webhooks:
            self.webhooks[webhook_id].mark_as_deleted()
            return True
        return False


class InMemoryActivityLogRepository(ActivityLogRepository):
    def __init__(self, fail: bool = False) -> None:
        self.entries: list[ActivityLog] = []
        self.fail = fail

    async def get_by_id(self, log_id: str) -> ActivityLog | None:
        return next((e for e in self.entries if e.id == log_id), None)

    async def list_by_application(
        self, application_id: str, limit: int = 100
    ) -> list[ActivityLog]:
        found = [e for e in self.entries if e.application_id == application_id]
        return list(reversed(found))[:limit]

    async def list_by_app_user(
        self, app_user_id: str, limit: int = 100
    ) -> list[ActivityLog]:
        found = [e for e in self.entries if e.app_user_id == app_user_id]
        return list(reversed(found))[:limit]

    async def create(self, entity: ActivityLog) -> ActivityLog:
        if self.fail:
            raise RuntimeError("activity log store unavailable")
        self.entries.append(entity)
        return entity

    async def update(self, entity: ActivityLog) -> ActivityLog:
        raise NotImplementedError("Activity logs are append-only")

    async def delete(self, entity: ActivityLog | str) -> bool:
        raise NotImplementedError("Activity logs are append-only")

    async def delete_by_application(self, application_id: str) -> int:
        before = len(self.entries)
        self.entries = [e for e in self.entries if e.application_id != application_id]
        return before - len(self.entries)


# ============================================
# Ports
# ============================================


class PlainPasswordHasher:
    """Reversible stand-in for bcrypt; records every verify call."""

    PREFIX = "plain$"

    def __init__(self) -> None:
        self.verify_calls: list[str] = []

    async def hash(self, password: str) -> str:
        return f"{self.PREFIX}{password}"

    async def verify(self, password: str, password_hash: str) -> bool:
        self.verify_calls.append(password)
        return password_hash == f"{self.PREFIX}{password}"


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.requests: list[NotificationRequest] = []

    def notify(self, request: NotificationRequest) -> None:
        self.requests.append(request)

    @property
    def events(self) -> list[WebhookEvent]:
        return [r.event for r in self.requests]


class ExplodingNotifier(Notifier):
    def notify(self, request: NotificationRequest) -> None:
        raise RuntimeError("event loop is gone")


class RecordingDelivery(WebhookDelivery):
    """Returns scripted results per webhook URL (default: success)."""

    def __init__(
        self,
        results: dict[str, bool | Exception] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.results = results or {}
        self.delay = delay
        self.sent: list[tuple[Webhook, WebhookPayload]] = []

    @property
    def inter_delivery_delay(self) -> float:
        return self.delay

    async def send(self, webhook: Webhook, payload: WebhookPayload) -> bool:
        self.sent.append((webhook, payload))
        result = self.results.get(webhook.url, True)
        if isinstance(result, Exception):
            raise result
        return result


class StaticProbe(WebhookTargetProbe):
    def __init__(self, result: ProbeResult | None = None) -> None:
        self.result = result or ProbeResult(accepted=True, message="Webhook verified")
        self.probed: list[str] = []

    async def probe(self, url: str) -> ProbeResult:
        self.probed.append(url)
        return self.result
