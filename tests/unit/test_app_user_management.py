"""Tests for owner-side app user management."""

import pytest

from src.modules.app_users.application.commands import (
    CreateAppUserCommand,
    UpdateAppUserCommand,
)
from src.modules.app_users.application.management import AppUserService
from src.modules.app_users.domain.exceptions import (
    AppUserConflictError,
    AppUserNotFoundError,
)
from src.modules.licenses.application.service import LicenseRegistry
from tests.fakes import PlainPasswordHasher


@pytest.fixture
def service(user_repo, license_repo, hasher) -> AppUserService:
    return AppUserService(user_repo, LicenseRegistry(license_repo), hasher)


class TestCreate:
    @pytest.mark.anyio
    async def test_create_hashes_password(self, service, application) -> None:
        user = await service.create(
            application.id,
            CreateAppUserCommand(username="bob", password="pw", email="bob@example.com"),
        )

        assert user.password_hash == f"{PlainPasswordHasher.PREFIX}pw"
        assert user.license_key_id is None
        assert user.email == "bob@example.com"

    @pytest.mark.anyio
    async def test_blank_optional_fields_are_stored_as_none(
        self, service, application
    ) -> None:
        user = await service.create(
            application.id,
            CreateAppUserCommand(username="bob", password="pw", email="", hwid=""),
        )
        assert user.email is None
        assert user.hwid is None

    @pytest.mark.anyio
    async def test_username_conflict(self, service, application, make_user) -> None:
        make_user(username="bob")

        with pytest.raises(AppUserConflictError) as exc_info:
            await service.create(
                application.id, CreateAppUserCommand(username="bob", password="pw")
            )
        assert exc_info.value.field == "username"

    @pytest.mark.anyio
    async def test_email_conflict(self, service, application, make_user) -> None:
        make_user(username="carol", email="shared@example.com")

        with pytest.raises(AppUserConflictError) as exc_info:
            await service.create(
                application.id,
                CreateAppUserCommand(
                    username="bob", password="pw", email="shared@example.com"
                ),
            )
        assert exc_info.value.field == "email"

    @pytest.mark.anyio
    async def test_same_username_in_other_application_is_allowed(
        self, service, application, make_user
    ) -> None:
        make_user(username="bob", application_id="other-app")

        user = await service.create(
            application.id, CreateAppUserCommand(username="bob", password="pw")
        )
        assert user.application_id == application.id


class TestUpdate:
    @pytest.mark.anyio
    async def test_partial_update(self, service, application, make_user) -> None:
        user = make_user(email="old@example.com", hwid="HW-1")

        updated = await service.update(
            application.id, user.id, UpdateAppUserCommand(is_active=False)
        )

        assert updated.is_active is False
        assert updated.email == "old@example.com"
        assert updated.hwid == "HW-1"

    @pytest.mark.anyio
    async def test_password_is_rehashed(self, service, application, make_user) -> None:
        user = make_user()

        await service.update(
            application.id, user.id, UpdateAppUserCommand(password="new-secret")
        )

        assert user.password_hash == f"{PlainPasswordHasher.PREFIX}new-secret"

    @pytest.mark.anyio
    async def test_email_conflict(self, service, application, make_user) -> None:
        make_user(username="carol", email="taken@example.com")
        user = make_user()

        with pytest.raises(AppUserConflictError):
            await service.update(
                application.id,
                user.id,
                UpdateAppUserCommand(email="taken@example.com"),
            )

    @pytest.mark.anyio
    async def test_explicit_empty_hwid_clears_binding(
        self, service, application, make_user
    ) -> None:
        user = make_user(hwid="HW-1")

        await service.update(application.id, user.id, UpdateAppUserCommand(hwid=""))

        assert user.hwid is None

    @pytest.mark.anyio
    async def test_update_user_of_other_application(
        self, service, application, make_user
    ) -> None:
        user = make_user(application_id="other-app")

        with pytest.raises(AppUserNotFoundError):
            await service.update(
                application.id, user.id, UpdateAppUserCommand(is_active=False)
            )


class TestAccountControls:
    @pytest.mark.anyio
    async def test_pause_and_unpause(self, service, application, make_user) -> None:
        user = make_user()

        await service.pause(application.id, user.id)
        assert user.is_paused is True

        await service.unpause(application.id, user.id)
        assert user.is_paused is False

    @pytest.mark.anyio
    async def test_reset_hwid(self, service, application, make_user) -> None:
        user = make_user(hwid="HW-1")

        await service.reset_hwid(application.id, user.id)

        assert user.hwid is None

    @pytest.mark.anyio
    async def test_get_unknown_user(self, service, application) -> None:
        with pytest.raises(AppUserNotFoundError):
            await service.get(application.id, "missing")

    @pytest.mark.anyio
    async def test_delete_releases_license_slot(
        self, service, application, make_user, make_license, user_repo
    ) -> None:
        key = make_license(max_users=2, current_users=1)
        user = make_user(license_key_id=key.id)

        await service.delete(application.id, user.id)

        assert user.id not in user_repo.users
        assert key.current_users == 0

    @pytest.mark.anyio
    async def test_delete_without_license(
        self, service, application, make_user, user_repo
    ) -> None:
        user = make_user()

        await service.delete(application.id, user.id)

        assert user_repo.users == {}
