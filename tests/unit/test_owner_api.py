"""HTTP tests for the owner dashboard endpoints.

当前 owner 通过依赖覆盖固定为 OWNER_ID；响应使用 ApiResponse 包装，
错误使用 {"error": {"code", "message"}}。
"""

from datetime import UTC, datetime, timedelta

import pytest
from httpx import AsyncClient

from src.modules.app_users.domain.entities import ActiveSession
from src.modules.applications.domain.entities import Application
from src.modules.blacklist.domain.entities import BlacklistType
from src.modules.notifications.application.service import NotificationService
from src.modules.notifications.domain.entities import (
    ActivityLog,
    ProbeResult,
    WebhookEvent,
)

BASE = "/api/v1/owner"


@pytest.fixture
def foreign_application(application_repo) -> Application:
    app = Application(owner_id="someone-else", name="Not Mine", api_key="kw_foreign")
    application_repo.applications[app.id] = app
    return app


class TestApplications:
    @pytest.mark.anyio
    async def test_create_and_list(self, async_client: AsyncClient) -> None:
        created = await async_client.post(
            f"{BASE}/applications",
            json={"name": "My Loader", "version": "2.0.0", "hwid_lock_enabled": True},
        )

        assert created.status_code == 201
        body = created.json()
        assert body["code"] == 201
        data = body["data"]
        assert data["api_key"].startswith("kw_")
        assert data["hwid_lock_enabled"] is True
        assert data["login_success_message"] == "Login successful!"

        listed = await async_client.get(f"{BASE}/applications")
        assert [a["id"] for a in listed.json()["data"]] == [data["id"]]

    @pytest.mark.anyio
    async def test_foreign_application_is_forbidden(
        self, async_client: AsyncClient, foreign_application
    ) -> None:
        response = await async_client.get(
            f"{BASE}/applications/{foreign_application.id}"
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "APPLICATION_ACCESS_DENIED"

    @pytest.mark.anyio
    async def test_unknown_application(self, async_client: AsyncClient) -> None:
        response = await async_client.get(f"{BASE}/applications/missing")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    @pytest.mark.anyio
    async def test_update_keeps_api_key(
        self, async_client: AsyncClient, application
    ) -> None:
        response = await async_client.patch(
            f"{BASE}/applications/{application.id}",
            json={"version": "1.1.0", "login_failed_message": "Nope"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["version"] == "1.1.0"
        assert data["login_failed_message"] == "Nope"
        assert data["api_key"] == application.api_key

    @pytest.mark.anyio
    async def test_owner_validation_errors_keep_default_shape(
        self, async_client: AsyncClient
    ) -> None:
        response = await async_client.post(f"{BASE}/applications", json={"name": ""})

        assert response.status_code == 422
        assert "detail" in response.json()


class TestLicenses:
    @pytest.mark.anyio
    async def test_create_and_list(self, async_client: AsyncClient, application) -> None:
        created = await async_client.post(
            f"{BASE}/applications/{application.id}/licenses",
            json={"max_users": 3, "validity_days": 30},
        )

        assert created.status_code == 201
        data = created.json()["data"]
        assert data["license_key"].startswith("TEST-")
        assert data["current_users"] == 0
        assert data["is_valid"] is True

        listed = await async_client.get(f"{BASE}/applications/{application.id}/licenses")
        assert len(listed.json()["data"]) == 1

    @pytest.mark.anyio
    async def test_expiry_is_required(
        self, async_client: AsyncClient, application
    ) -> None:
        response = await async_client.post(
            f"{BASE}/applications/{application.id}/licenses", json={"max_users": 1}
        )

        assert response.status_code == 400

    @pytest.mark.anyio
    async def test_generate_preview(self, async_client: AsyncClient, application) -> None:
        response = await async_client.get(
            f"{BASE}/applications/{application.id}/licenses/generate"
        )

        assert response.status_code == 200
        assert response.json()["data"]["generated_key"].startswith("TEST-")

    @pytest.mark.anyio
    async def test_foreign_application(
        self, async_client: AsyncClient, foreign_application
    ) -> None:
        response = await async_client.get(
            f"{BASE}/applications/{foreign_application.id}/licenses"
        )
        assert response.status_code == 403


class TestAppUsers:
    @pytest.mark.anyio
    async def test_pause_and_reset_hwid(
        self, async_client: AsyncClient, application, make_user
    ) -> None:
        user = make_user(hwid="HW-1")
        prefix = f"{BASE}/applications/{application.id}/users/{user.id}"

        paused = await async_client.post(f"{prefix}/pause")
        assert paused.status_code == 200
        assert paused.json()["data"]["is_paused"] is True

        reset = await async_client.post(f"{prefix}/reset-hwid")
        assert reset.status_code == 200
        assert reset.json()["data"]["hwid"] is None
        assert "password_hash" not in reset.json()["data"]

    @pytest.mark.anyio
    async def test_create_conflict(
        self, async_client: AsyncClient, application, make_user
    ) -> None:
        make_user(username="bob")

        response = await async_client.post(
            f"{BASE}/applications/{application.id}/users",
            json={"username": "bob", "password": "pw"},
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "APP_USER_CONFLICT"


class TestBlacklist:
    @pytest.mark.anyio
    async def test_create_global_and_scoped(
        self, async_client: AsyncClient, application
    ) -> None:
        scoped = await async_client.post(
            f"{BASE}/blacklist",
            json={"type": "ip", "value": "10.0.0.1", "application_id": application.id},
        )
        global_entry = await async_client.post(
            f"{BASE}/blacklist", json={"type": "hwid", "value": "HW-BAD"}
        )

        assert scoped.status_code == global_entry.status_code == 201
        assert global_entry.json()["data"]["application_id"] is None

        listed = await async_client.get(f"{BASE}/blacklist")
        types = sorted(e["type"] for e in listed.json()["data"])
        assert types == [BlacklistType.HWID.value, BlacklistType.IP.value]

    @pytest.mark.anyio
    async def test_cannot_target_foreign_application(
        self, async_client: AsyncClient, foreign_application
    ) -> None:
        response = await async_client.post(
            f"{BASE}/blacklist",
            json={
                "type": "ip",
                "value": "10.0.0.1",
                "application_id": foreign_application.id,
            },
        )
        assert response.status_code == 403


class TestWebhooks:
    @pytest.mark.anyio
    async def test_create_hides_secret(
        self, async_client: AsyncClient, probe, webhook_repo
    ) -> None:
        response = await async_client.post(
            f"{BASE}/webhooks",
            json={
                "url": "https://hooks.example.com/keyward",
                "events": ["user_login", "user_registration"],
                "secret": "s3cret",
            },
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["has_secret"] is True
        assert "secret" not in data
        assert data["events"] == [
            WebhookEvent.USER_LOGIN.value,
            WebhookEvent.USER_REGISTER.value,
        ]
        assert probe.probed == ["https://hooks.example.com/keyward"]
        assert len(webhook_repo.webhooks) == 1

    @pytest.mark.anyio
    async def test_rejected_target(self, async_client: AsyncClient, probe) -> None:
        probe.result = ProbeResult(
            accepted=False,
            message="Webhook endpoint returned HTML page instead of JSON. "
            "Check the webhook URL.",
        )

        response = await async_client.post(
            f"{BASE}/webhooks",
            json={"url": "https://example.com/login", "events": ["user_login"]},
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "WEBHOOK_TARGET_REJECTED"
        assert "HTML" in error["message"]

    @pytest.mark.anyio
    async def test_send_test(self, async_client: AsyncClient, delivery) -> None:
        created = await async_client.post(
            f"{BASE}/webhooks",
            json={"url": "https://hooks.example.com/keyward", "events": ["user_login"]},
        )
        webhook_id = created.json()["data"]["id"]

        response = await async_client.post(f"{BASE}/webhooks/{webhook_id}/test")

        assert response.status_code == 200
        assert response.json()["data"] == {"delivered": True}
        assert len(delivery.sent) == 1


class TestActivityLogs:
    @pytest.mark.anyio
    async def test_login_outcomes_are_listed(
        self,
        async_client: AsyncClient,
        application,
        activity_repo,
        webhook_repo,
        delivery,
        notifier,
        make_user,
    ) -> None:
        make_user()
        await async_client.post(
            "/api/v1/login",
            json={"username": "alice", "password": "wrong"},
            headers={"X-API-Key": application.api_key},
        )
        # 模拟后台投递：把记录下的通知写入活动日志
        service = NotificationService(activity_repo, webhook_repo, delivery)
        for request in notifier.requests:
            await service.log_and_notify(request)

        response = await async_client.get(
            f"{BASE}/applications/{application.id}/activity-logs"
        )

        assert response.status_code == 200
        [entry] = response.json()["data"]
        assert entry["event"] == "login_failed"
        assert entry["success"] is False


class TestMonitoring:
    @pytest.mark.anyio
    async def test_lists_only_active_sessions(
        self, async_client: AsyncClient, application, make_user, session_repo
    ) -> None:
        user = make_user()
        now = datetime.now(UTC)
        for token, is_active, idle in (
            ("tok-old", True, 120),
            ("tok-new", True, 5),
            ("tok-ended", False, 1),
        ):
            session = ActiveSession(
                application_id=application.id,
                app_user_id=user.id,
                session_token=token,
                last_activity=now - timedelta(seconds=idle),
                is_active=is_active,
            )
            session_repo.sessions[session.id] = session

        response = await async_client.get(
            f"{BASE}/applications/{application.id}/sessions"
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert [s["session_token"] for s in data] == ["tok-new", "tok-old"]
        assert data[0]["app_user_id"] == user.id

    @pytest.mark.anyio
    async def test_stats(
        self,
        async_client: AsyncClient,
        application,
        make_user,
        session_repo,
        activity_repo,
    ) -> None:
        alice = make_user()
        make_user(username="bob", is_paused=True)
        session = ActiveSession(
            application_id=application.id, app_user_id=alice.id, session_token="tok"
        )
        session_repo.sessions[session.id] = session
        for event, success in (
            (WebhookEvent.USER_LOGIN, True),
            (WebhookEvent.LOGIN_FAILED, False),
            (WebhookEvent.SESSION_START, True),
            (WebhookEvent.USER_LOGIN, True),
        ):
            activity_repo.entries.append(
                ActivityLog(application_id=application.id, event=event, success=success)
            )

        response = await async_client.get(f"{BASE}/applications/{application.id}/stats")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_users"] == 2
        assert data["active_users"] == 1
        assert data["active_sessions"] == 1
        assert data["login_success_rate"] == 67
        assert data["recent_requests"] == 4
        assert data["last_activity"] is not None
        assert data["application_status"] == "online"
        assert data["hwid_lock_enabled"] is False

    @pytest.mark.anyio
    async def test_stats_without_activity(
        self, async_client: AsyncClient, application
    ) -> None:
        application.is_active = False

        response = await async_client.get(f"{BASE}/applications/{application.id}/stats")

        data = response.json()["data"]
        assert data["login_success_rate"] == 100
        assert data["last_activity"] is None
        assert data["application_status"] == "offline"

    @pytest.mark.anyio
    async def test_foreign_application(
        self, async_client: AsyncClient, foreign_application
    ) -> None:
        for view in ("sessions", "stats"):
            response = await async_client.get(
                f"{BASE}/applications/{foreign_application.id}/{view}"
            )
            assert response.status_code == 403, view
