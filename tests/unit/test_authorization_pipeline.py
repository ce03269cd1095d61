"""Tests for the login authorization pipeline.

每个终止阶段：状态码、响应文案、事件名，以及是否恰好通知一次。
"""

from datetime import UTC, datetime, timedelta

import pytest

from src.core.domain.request_context import RequestContext
from src.modules.app_users.application.authorization import (
    HWID_REQUIRED_MESSAGE,
    INVALID_REQUEST_MESSAGE,
    PAUSED_MESSAGE,
    AuthorizationPipeline,
)
from src.modules.app_users.application.commands import LoginCommand
from src.modules.blacklist.application.service import BlacklistChecker
from src.modules.blacklist.domain.entities import BlacklistEntry, BlacklistType
from src.modules.notifications.domain.entities import WebhookEvent
from tests.fakes import OWNER_ID, ExplodingNotifier

CLIENT_IP = "203.0.113.7"


@pytest.fixture
def context() -> RequestContext:
    return RequestContext(ip_address=CLIENT_IP, user_agent="loader/1.0")


@pytest.fixture
def pipeline(blacklist_repo, user_repo, hasher, notifier) -> AuthorizationPipeline:
    return AuthorizationPipeline(
        BlacklistChecker(blacklist_repo), user_repo, hasher, notifier
    )


def _login(**fields) -> LoginCommand:
    fields.setdefault("username", "alice")
    fields.setdefault("password", "secret")
    return LoginCommand(**fields)


def _block(blacklist_repo, application, entry_type: BlacklistType, value: str):
    entry = BlacklistEntry(
        application_id=application.id,
        created_by=OWNER_ID,
        type=entry_type,
        value=value,
        reason="abuse",
    )
    blacklist_repo.entries[entry.id] = entry
    return entry


class TestRequestValidation:
    @pytest.mark.anyio
    @pytest.mark.parametrize(
        "fields", [{"username": ""}, {"password": ""}, {"username": "", "password": ""}]
    )
    async def test_missing_credentials(
        self, pipeline, application, context, notifier, fields
    ) -> None:
        outcome = await pipeline.authorize(application, _login(**fields), context)

        assert outcome.status_code == 400
        assert outcome.message == INVALID_REQUEST_MESSAGE
        assert outcome.event is None
        assert notifier.requests == []


class TestBlacklistStages:
    @pytest.mark.anyio
    async def test_ip_blocked(
        self, pipeline, application, context, blacklist_repo, notifier, hasher, make_user
    ) -> None:
        make_user()
        entry = _block(blacklist_repo, application, BlacklistType.IP, CLIENT_IP)

        outcome = await pipeline.authorize(application, _login(), context)

        assert outcome.status_code == 403
        assert outcome.message == "Access denied: IP address is blacklisted"
        assert outcome.event == WebhookEvent.LOGIN_BLOCKED_IP
        assert notifier.events == [WebhookEvent.LOGIN_BLOCKED_IP]
        request = notifier.requests[0]
        assert request.metadata == {"blacklist_entry_id": entry.id, "reason": "abuse"}
        assert request.error_message == (
            f"Login blocked: IP {CLIENT_IP} is blacklisted - abuse"
        )
        # 黑名单命中后不再执行后续阶段
        assert hasher.verify_calls == []

    @pytest.mark.anyio
    async def test_username_blocked(
        self, pipeline, application, context, blacklist_repo, notifier, hasher
    ) -> None:
        _block(blacklist_repo, application, BlacklistType.USERNAME, "alice")

        outcome = await pipeline.authorize(application, _login(), context)

        assert outcome.status_code == 403
        assert outcome.message == "Access denied: Username is blacklisted"
        assert notifier.events == [WebhookEvent.LOGIN_BLOCKED_USERNAME]
        assert hasher.verify_calls == []

    @pytest.mark.anyio
    async def test_hwid_blocked(
        self, pipeline, application, context, blacklist_repo, notifier
    ) -> None:
        _block(blacklist_repo, application, BlacklistType.HWID, "HW-BAD")

        outcome = await pipeline.authorize(application, _login(hwid="HW-BAD"), context)

        assert outcome.status_code == 403
        assert outcome.message == "Access denied: Hardware ID is blacklisted"
        assert notifier.events == [WebhookEvent.LOGIN_BLOCKED_HWID]

    @pytest.mark.anyio
    async def test_ip_checked_before_username(
        self, pipeline, application, context, blacklist_repo, notifier
    ) -> None:
        _block(blacklist_repo, application, BlacklistType.USERNAME, "alice")
        _block(blacklist_repo, application, BlacklistType.IP, CLIENT_IP)

        await pipeline.authorize(application, _login(), context)

        assert notifier.events == [WebhookEvent.LOGIN_BLOCKED_IP]

    @pytest.mark.anyio
    async def test_owner_global_entry_blocks(
        self, pipeline, application, context, blacklist_repo, notifier
    ) -> None:
        entry = BlacklistEntry(
            created_by=OWNER_ID, type=BlacklistType.USERNAME, value="alice"
        )
        blacklist_repo.entries[entry.id] = entry

        outcome = await pipeline.authorize(application, _login(), context)

        assert outcome.status_code == 403
        assert notifier.requests[0].error_message.endswith("No reason provided")


class TestVersionStage:
    @pytest.mark.anyio
    async def test_version_mismatch(
        self, pipeline, application, context, notifier, make_user
    ) -> None:
        make_user()

        outcome = await pipeline.authorize(application, _login(version="2.0.0"), context)

        assert outcome.status_code == 400
        assert outcome.event == WebhookEvent.VERSION_MISMATCH
        body = outcome.to_body()
        assert body["success"] is False
        assert body["required_version"] == "1.0.0"
        assert body["current_version"] == "2.0.0"
        assert notifier.events == [WebhookEvent.VERSION_MISMATCH]

    @pytest.mark.anyio
    async def test_custom_version_message(
        self, pipeline, application, context, make_user
    ) -> None:
        make_user()
        application.version_mismatch_message = "Grab v1.0.0 from the site"

        outcome = await pipeline.authorize(application, _login(version="0.9"), context)

        assert outcome.message == "Grab v1.0.0 from the site"

    @pytest.mark.anyio
    async def test_missing_version_is_not_checked(
        self, pipeline, application, context, make_user
    ) -> None:
        make_user()
        outcome = await pipeline.authorize(application, _login(), context)
        assert outcome.status_code == 200


class TestAccountStages:
    @pytest.mark.anyio
    async def test_unknown_user(self, pipeline, application, context, notifier) -> None:
        outcome = await pipeline.authorize(application, _login(username="ghost"), context)

        assert outcome.status_code == 401
        assert outcome.message == "Invalid credentials!"
        assert outcome.event == WebhookEvent.LOGIN_FAILED
        request = notifier.requests[0]
        assert request.metadata["reason"] == "non_existent_user"
        assert request.user.username == "ghost"
        assert request.user.id is None

    @pytest.mark.anyio
    async def test_user_from_other_application_is_unknown(
        self, pipeline, application, context, notifier, make_user
    ) -> None:
        make_user(application_id="other-app")

        outcome = await pipeline.authorize(application, _login(), context)

        assert outcome.status_code == 401
        assert notifier.requests[0].error_message == "User not found"

    @pytest.mark.anyio
    async def test_disabled(self, pipeline, application, context, notifier, make_user) -> None:
        make_user(is_active=False)

        outcome = await pipeline.authorize(application, _login(), context)

        assert outcome.status_code == 401
        assert outcome.message == "Account is disabled!"
        assert notifier.events == [WebhookEvent.ACCOUNT_DISABLED]

    @pytest.mark.anyio
    async def test_paused_uses_fixed_message(
        self, pipeline, application, context, notifier, make_user
    ) -> None:
        make_user(is_paused=True)
        application.account_disabled_message = "Custom disabled text"

        outcome = await pipeline.authorize(application, _login(), context)

        assert outcome.status_code == 401
        assert outcome.message == PAUSED_MESSAGE
        assert notifier.events == [WebhookEvent.ACCOUNT_DISABLED]
        assert notifier.requests[0].metadata == {"reason": "paused"}

    @pytest.mark.anyio
    async def test_expired(
        self, pipeline, application, context, notifier, hasher, make_user
    ) -> None:
        expired_at = datetime.now(UTC) - timedelta(days=1)
        make_user(expires_at=expired_at)

        outcome = await pipeline.authorize(application, _login(), context)

        assert outcome.status_code == 401
        assert outcome.message == "Account has expired!"
        assert notifier.events == [WebhookEvent.ACCOUNT_EXPIRED]
        assert notifier.requests[0].metadata == {"expired_at": expired_at.isoformat()}
        # 过期检查先于密码校验
        assert hasher.verify_calls == []

    @pytest.mark.anyio
    async def test_wrong_password_counts_attempts(
        self, pipeline, application, context, notifier, make_user
    ) -> None:
        user = make_user()

        first = await pipeline.authorize(application, _login(password="nope"), context)
        second = await pipeline.authorize(application, _login(password="nope"), context)

        assert first.status_code == second.status_code == 401
        assert first.message == "Invalid credentials!"
        assert user.login_attempts == 2
        assert [r.metadata["login_attempts"] for r in notifier.requests] == [1, 2]
        assert notifier.requests[0].error_message == "Invalid password provided"


class TestHwidStage:
    @pytest.mark.anyio
    async def test_first_login_binds_then_mismatch(
        self, pipeline, application, context, notifier, make_user
    ) -> None:
        application.hwid_lock_enabled = True
        user = make_user()

        first = await pipeline.authorize(application, _login(hwid="ABC"), context)
        assert first.status_code == 200
        assert first.body["hwid_locked"] is True
        assert user.hwid == "ABC"

        second = await pipeline.authorize(application, _login(hwid="XYZ"), context)
        assert second.status_code == 401
        assert second.event == WebhookEvent.HWID_MISMATCH
        assert second.message == "Hardware ID mismatch detected!"
        assert notifier.requests[-1].error_message == (
            "HWID mismatch: Expected ABC, got XYZ"
        )
        assert user.hwid == "ABC"

    @pytest.mark.anyio
    async def test_missing_hwid_is_a_client_error(
        self, pipeline, application, context, notifier, make_user
    ) -> None:
        application.hwid_lock_enabled = True
        make_user()

        outcome = await pipeline.authorize(application, _login(), context)

        assert outcome.status_code == 400
        assert outcome.message == HWID_REQUIRED_MESSAGE
        assert notifier.requests == []

    @pytest.mark.anyio
    async def test_lock_disabled_ignores_hwid(
        self, pipeline, application, context, make_user
    ) -> None:
        user = make_user(hwid="BOUND")

        outcome = await pipeline.authorize(application, _login(hwid="OTHER"), context)

        assert outcome.status_code == 200
        assert outcome.body["hwid_locked"] is False
        assert user.hwid == "BOUND"


class TestSuccess:
    @pytest.mark.anyio
    async def test_success_resets_attempts(
        self, pipeline, application, context, notifier, make_user
    ) -> None:
        expires_at = datetime.now(UTC) + timedelta(days=7)
        user = make_user(email="alice@example.com", expires_at=expires_at, login_attempts=3)

        outcome = await pipeline.authorize(application, _login(version="1.0.0"), context)

        assert outcome.status_code == 200
        assert outcome.success is True
        assert outcome.to_body() == {
            "success": True,
            "message": "Login successful!",
            "user_id": user.id,
            "username": "alice",
            "email": "alice@example.com",
            "expires_at": expires_at.isoformat(),
            "hwid_locked": False,
        }
        assert user.login_attempts == 0
        assert user.last_login_ip == CLIENT_IP
        assert notifier.events == [WebhookEvent.USER_LOGIN]
        request = notifier.requests[0]
        assert request.success is True
        assert request.user.id == user.id
        assert request.ip_address == CLIENT_IP
        assert request.user_agent == "loader/1.0"

    @pytest.mark.anyio
    async def test_notification_failure_does_not_change_outcome(
        self, blacklist_repo, user_repo, hasher, application, context, make_user
    ) -> None:
        make_user()
        pipeline = AuthorizationPipeline(
            BlacklistChecker(blacklist_repo), user_repo, hasher, ExplodingNotifier()
        )

        outcome = await pipeline.authorize(application, _login(), context)

        assert outcome.status_code == 200
        assert outcome.success is True
