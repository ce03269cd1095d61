"""Tests for owner bearer-token authentication."""

from datetime import timedelta

import pytest
from fastapi import HTTPException
from httpx import AsyncClient

from src.core.infrastructure.security import jwt as infra_jwt
from src.core.infrastructure.security.jwt import create_access_token, decode_token
from tests.fakes import OWNER_ID


@pytest.fixture
def real_owner_auth(async_client: AsyncClient) -> AsyncClient:
    """恢复真实的 JWT 校验依赖（async_client 默认固定 owner）。"""
    from main import app
    from src.core.application import security as app_security

    app.dependency_overrides[app_security.get_current_owner_id] = (
        infra_jwt.get_current_owner_id
    )
    return async_client


class TestTokens:
    def test_round_trip(self) -> None:
        token = create_access_token(OWNER_ID)

        assert decode_token(token).sub == OWNER_ID

    def test_expired(self) -> None:
        token = create_access_token(OWNER_ID, expires_delta=timedelta(seconds=-5))

        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)
        assert exc_info.value.detail == "Token has expired"

    def test_tampered(self) -> None:
        token = create_access_token(OWNER_ID) + "x"

        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)
        assert exc_info.value.status_code == 401


class TestOwnerEndpoints:
    @pytest.mark.anyio
    async def test_bearer_token_required(self, real_owner_auth: AsyncClient) -> None:
        response = await real_owner_auth.get("/api/v1/owner/applications")

        assert response.status_code == 401

    @pytest.mark.anyio
    async def test_token_subject_is_owner(
        self, real_owner_auth: AsyncClient, application
    ) -> None:
        token = create_access_token(OWNER_ID)

        response = await real_owner_auth.get(
            "/api/v1/owner/applications",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 200
        assert [a["id"] for a in response.json()["data"]] == [application.id]
