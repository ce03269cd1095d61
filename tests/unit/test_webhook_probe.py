"""Tests for the creation-time webhook probe."""

import json

import httpx
import pytest

from src.modules.notifications.infrastructure.webhooks.probe import HttpWebhookProbe

URL = "https://hooks.example.com/keyward"


def _probe(handler) -> HttpWebhookProbe:
    return HttpWebhookProbe(timeout=1.0, transport=httpx.MockTransport(handler))


class TestHttpWebhookProbe:
    @pytest.mark.anyio
    async def test_accepts_2xx(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        result = await _probe(handler).probe(URL)

        assert result.accepted is True
        assert result.status_code == 200
        assert result.warning is None
        body = json.loads(seen[0].content)
        assert body["event"] == "webhook_test"
        assert body["metadata"] == {"message": "Webhook endpoint verification"}

    @pytest.mark.anyio
    async def test_rejects_error_status(self) -> None:
        result = await _probe(lambda request: httpx.Response(404)).probe(URL)

        assert result.accepted is False
        assert result.status_code == 404
        assert result.message == "Webhook endpoint returned status 404"

    @pytest.mark.anyio
    async def test_rejects_html(self) -> None:
        result = await _probe(
            lambda request: httpx.Response(
                200,
                headers={"content-type": "text/html"},
                text="<html><body>Login</body></html>",
            )
        ).probe(URL)

        assert result.accepted is False
        assert "HTML page instead of JSON" in result.message

    @pytest.mark.anyio
    async def test_timeout_is_accepted_with_warning(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        result = await _probe(handler).probe(URL)

        assert result.accepted is True
        assert result.warning is not None

    @pytest.mark.anyio
    async def test_network_error_is_rejected(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        result = await _probe(handler).probe(URL)

        assert result.accepted is False
        assert result.message.startswith("Could not reach webhook endpoint")

    @pytest.mark.anyio
    async def test_discord_probe_sends_embed(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        result = await _probe(handler).probe("https://discord.com/api/webhooks/1/t")

        assert result.accepted is True
        assert "embeds" in json.loads(seen[0].content)
