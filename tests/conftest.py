"""
pytest 配置和共享 fixtures。

测试分层：
- unit/: 单元测试（内存仓储，不依赖外部服务）
- integration/: 集成测试（需要 PostgreSQL）

使用方法：
    # 运行所有测试
    uv run pytest

    # 只运行单元测试
    uv run pytest tests/unit/

    # 只运行集成测试（需要先执行 scripts/create_test_db.py --create-tables）
    uv run pytest tests/integration/ -m integration

    # 运行带覆盖率
    uv run pytest --cov=src --cov-report=html
"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from src.core.config import Settings
from src.modules.app_users.domain.entities import AppUser
from src.modules.applications.domain.entities import Application
from src.modules.licenses.domain.entities import LicenseKey
from tests.fakes import (
    API_KEY,
    OWNER_ID,
    InMemoryActiveSessionRepository,
    InMemoryActivityLogRepository,
    InMemoryApplicationRepository,
    InMemoryAppUserRepository,
    InMemoryBlacklistRepository,
    InMemoryLicenseKeyRepository,
    InMemoryWebhookRepository,
    PlainPasswordHasher,
    RecordingDelivery,
    RecordingNotifier,
    StaticProbe,
)

# ============================================
# 配置 Fixtures
# ============================================


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def test_settings() -> Settings:
    """测试环境配置。"""
    return Settings(
        ENVIRONMENT="local",
        POSTGRES_SERVER="localhost",
        POSTGRES_PORT=5432,
        POSTGRES_USER="postgres",
        POSTGRES_PASSWORD="postgres",
        POSTGRES_DB="keyward_test",
        SECRET_KEY="test-secret-key-for-testing-only",
        PASSWORD_HASH_ROUNDS=4,
    )


# ============================================
# 内存仓储 Fixtures
# ============================================


@pytest.fixture
def application_repo() -> InMemoryApplicationRepository:
    return InMemoryApplicationRepository()


@pytest.fixture
def license_repo() -> InMemoryLicenseKeyRepository:
    return InMemoryLicenseKeyRepository()


@pytest.fixture
def blacklist_repo() -> InMemoryBlacklistRepository:
    return InMemoryBlacklistRepository()


@pytest.fixture
def user_repo() -> InMemoryAppUserRepository:
    return InMemoryAppUserRepository()


@pytest.fixture
def session_repo() -> InMemoryActiveSessionRepository:
    return InMemoryActiveSessionRepository()


@pytest.fixture
def webhook_repo() -> InMemoryWebhookRepository:
    return InMemoryWebhookRepository()


@pytest.fixture
def activity_repo() -> InMemoryActivityLogRepository:
    return InMemoryActivityLogRepository()


@pytest.fixture
def hasher() -> PlainPasswordHasher:
    return PlainPasswordHasher()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def delivery() -> RecordingDelivery:
    return RecordingDelivery()


@pytest.fixture
def probe() -> StaticProbe:
    return StaticProbe()


# ============================================
# 领域对象 Fixtures
# ============================================


@pytest.fixture
def application(application_repo: InMemoryApplicationRepository) -> Application:
    """已存储的示例应用（未开启 HWID 绑定，要求版本 1.0.0）。"""
    app = Application(
        owner_id=OWNER_ID,
        name="Test App",
        api_key=API_KEY,
        version="1.0.0",
    )
    application_repo.applications[app.id] = app
    return app


@pytest.fixture
def make_user(user_repo: InMemoryAppUserRepository, application: Application):
    """存储一个终端用户，密码默认为 secret。"""

    def _make(
        username: str = "alice",
        password: str = "secret",
        **fields,
    ) -> AppUser:
        user = AppUser(
            application_id=fields.pop("application_id", application.id),
            username=username,
            password_hash=f"{PlainPasswordHasher.PREFIX}{password}",
            **fields,
        )
        user_repo.users[user.id] = user
        return user

    return _make


@pytest.fixture
def make_license(license_repo: InMemoryLicenseKeyRepository, application: Application):
    def _make(
        key: str = "TEST-aaaaaaaa-bbbbbbbb-cccccccc",
        max_users: int = 1,
        current_users: int = 0,
        expires_in: timedelta = timedelta(days=30),
        **fields,
    ) -> LicenseKey:
        license_key = LicenseKey(
            application_id=fields.pop("application_id", application.id),
            license_key=key,
            max_users=max_users,
            current_users=current_users,
            expires_at=datetime.now(UTC) + expires_in,
            **fields,
        )
        license_repo.keys[license_key.id] = license_key
        return license_key

    return _make


# ============================================
# HTTP Client Fixtures
# ============================================


@pytest.fixture
async def async_client(
    application_repo,
    license_repo,
    blacklist_repo,
    user_repo,
    session_repo,
    webhook_repo,
    activity_repo,
    hasher,
    notifier,
    delivery,
    probe,
) -> AsyncGenerator[AsyncClient, None]:
    """异步 HTTP 客户端，所有仓储与端口替换为内存实现。

    不触发 lifespan，因此不会连接数据库。
    """
    from main import app
    from src.core.application import dependencies as core_app_deps
    from src.core.application import security as app_security
    from src.modules.app_users.application import dependencies as app_users_deps
    from src.modules.applications.application import (
        dependencies as applications_deps,
    )
    from src.modules.blacklist.application import dependencies as blacklist_deps
    from src.modules.licenses.application import dependencies as licenses_deps
    from src.modules.notifications.application import (
        dependencies as notifications_deps,
    )

    saved = dict(app.dependency_overrides)
    overrides = {
        app_security.get_current_owner_id: lambda: OWNER_ID,
        core_app_deps.get_password_hasher: lambda: hasher,
        applications_deps.get_application_repository: lambda: application_repo,
        applications_deps.get_application_scoped_data: lambda: [
            license_repo,
            blacklist_repo,
            user_repo,
            session_repo,
            activity_repo,
        ],
        licenses_deps.get_license_repository: lambda: license_repo,
        blacklist_deps.get_blacklist_repository: lambda: blacklist_repo,
        app_users_deps.get_app_user_repository: lambda: user_repo,
        app_users_deps.get_active_session_repository: lambda: session_repo,
        notifications_deps.get_webhook_repository: lambda: webhook_repo,
        notifications_deps.get_activity_log_repository: lambda: activity_repo,
        notifications_deps.get_notifier: lambda: notifier,
        notifications_deps.get_webhook_delivery: lambda: delivery,
        notifications_deps.get_webhook_probe: lambda: probe,
    }
    app.dependency_overrides.update(overrides)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    # 恢复 main.py 中注册的依赖覆盖
    app.dependency_overrides.clear()
    app.dependency_overrides.update(saved)
