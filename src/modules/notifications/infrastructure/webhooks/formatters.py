"""Webhook body formatters.

Discord 的 webhook 只接受 embed 格式，其余目标收到原始 JSON 载荷。
"""

import json
from abc import ABC, abstractmethod
from typing import Any

import httpx

from src.modules.notifications.domain.entities import WebhookPayload

DISCORD_URL_MARKERS = ("discord.com/api/webhooks", "discordapp.com/api/webhooks")

DISCORD_SUCCESS_COLOR = 0x00FF00
DISCORD_FAILURE_COLOR = 0xFF0000
DISCORD_FIELD_LIMIT = 1024

EVENT_EMOJIS: dict[str, str] = {
    "user_login": "🔐",
    "login_failed": "❌",
    "user_register": "👤",
    "account_expired": "⏰",
    "hwid_mismatch": "🔒",
    "version_mismatch": "🔄",
    "account_disabled": "🚫",
    "login_blocked_ip": "🚫",
    "login_blocked_username": "🚫",
    "login_blocked_hwid": "🚫",
}
DEFAULT_EMOJI = "📊"


def looks_like_html(response: httpx.Response) -> bool:
    content_type = response.headers.get("content-type", "")
    if "text/html" in content_type:
        return True
    head = response.text[:200].lstrip().lower()
    return head.startswith("<!doctype html") or head.startswith("<html")


class WebhookFormatter(ABC):
    """Builds the request for one kind of webhook target."""

    name: str = "generic"

    @abstractmethod
    def build_body(self, payload: WebhookPayload) -> dict[str, Any]:
        pass

    def headers(
        self, payload: WebhookPayload, retry_count: int, user_agent: str
    ) -> dict[str, str]:
        return {"Content-Type": "application/json", "User-Agent": user_agent}

    def is_success(self, response: httpx.Response) -> bool:
        return response.is_success

    def retry_after(self, response: httpx.Response) -> float | None:
        return None


class GenericWebhookFormatter(WebhookFormatter):
    def build_body(self, payload: WebhookPayload) -> dict[str, Any]:
        return payload.to_body()

    def headers(
        self, payload: WebhookPayload, retry_count: int, user_agent: str
    ) -> dict[str, str]:
        headers = super().headers(payload, retry_count, user_agent)
        headers.update(
            {
                "X-Webhook-Timestamp": payload.timestamp,
                "X-Webhook-Event": payload.event,
                "X-Webhook-Retry-Count": str(retry_count),
            }
        )
        return headers


def _truncate(value: str, limit: int = DISCORD_FIELD_LIMIT) -> str:
    return value if len(value) <= limit else value[: limit - 3] + "..."


class DiscordWebhookFormatter(WebhookFormatter):
    name = "discord"

    def build_body(self, payload: WebhookPayload) -> dict[str, Any]:
        emoji = EVENT_EMOJIS.get(payload.event, DEFAULT_EMOJI)
        fields: list[dict[str, Any]] = []

        if payload.user_data is not None:
            user = payload.user_data
            lines = [f"**Username:** {user.username}"]
            if user.email:
                lines.append(f"**Email:** {user.email}")
            if user.ip_address:
                lines.append(f"**IP:** {user.ip_address}")
            if user.hwid:
                lines.append(f"**HWID:** {user.hwid}")
            fields.append(
                {
                    "name": "User Information",
                    "value": _truncate("\n".join(lines)),
                    "inline": True,
                }
            )

        if payload.error_message:
            fields.append(
                {
                    "name": "Error Details",
                    "value": _truncate(payload.error_message),
                    "inline": False,
                }
            )

        if payload.metadata:
            lines = [f"**{key}:** {value}" for key, value in payload.metadata.items()]
            fields.append(
                {
                    "name": "Additional Information",
                    "value": _truncate("\n".join(lines)),
                    "inline": False,
                }
            )

        embed = {
            "title": f"{emoji} {payload.event.replace('_', ' ').upper()}",
            "color": DISCORD_SUCCESS_COLOR if payload.success else DISCORD_FAILURE_COLOR,
            "timestamp": payload.timestamp,
            "fields": fields,
            "footer": {"text": f"Application ID: {payload.application_id}"},
        }
        return {"embeds": [embed]}

    def is_success(self, response: httpx.Response) -> bool:
        return response.status_code in (200, 204)

    def retry_after(self, response: httpx.Response) -> float | None:
        """Discord 429 responses carry ``retry_after`` in seconds."""
        if response.status_code != 429:
            return None
        try:
            value = response.json().get("retry_after")
        except (json.JSONDecodeError, AttributeError):
            value = None
        if value is None:
            value = response.headers.get("retry-after")
        try:
            return float(value) if value is not None else None
        except (TypeError, ValueError):
            return None


def is_discord_url(url: str) -> bool:
    return any(marker in url for marker in DISCORD_URL_MARKERS)


def select_formatter(url: str) -> WebhookFormatter:
    if is_discord_url(url):
        return DiscordWebhookFormatter()
    return GenericWebhookFormatter()
