"""Creation-time webhook reachability test."""

import json

import httpx
from loguru import logger

from src.core.config import settings
from src.core.domain.base_entity import utc_now
from src.modules.notifications.domain.entities import ProbeResult, WebhookPayload
from src.modules.notifications.domain.ports import WebhookTargetProbe
from src.modules.notifications.infrastructure.webhooks.formatters import (
    looks_like_html,
    select_formatter,
)


def build_probe_payload() -> WebhookPayload:
    return WebhookPayload(
        event="webhook_test",
        timestamp=utc_now().isoformat(),
        application_id="test",
        metadata={"message": "Webhook endpoint verification"},
        success=True,
    )


class HttpWebhookProbe(WebhookTargetProbe):
    """POSTs a test payload and judges the answer.

    超时视为可接受（保存并附带警告），HTML 响应、非 2xx 与其它网络错误拒绝保存。
    """

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout or settings.WEBHOOK_PROBE_TIMEOUT_SEC
        self._transport = transport

    async def probe(self, url: str) -> ProbeResult:
        formatter = select_formatter(url)
        payload = build_probe_payload()
        content = json.dumps(
            formatter.build_body(payload), separators=(",", ":"), ensure_ascii=False
        ).encode("utf-8")
        headers = formatter.headers(payload, 0, settings.WEBHOOK_USER_AGENT)

        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self.timeout
            ) as client:
                response = await client.post(url, content=content, headers=headers)
        except httpx.TimeoutException:
            logger.warning(f"Webhook probe timed out for {url}")
            return ProbeResult(
                accepted=True,
                message="Webhook saved",
                warning="Webhook endpoint did not respond in time; deliveries may fail",
            )
        except httpx.HTTPError as e:
            return ProbeResult(
                accepted=False, message=f"Could not reach webhook endpoint: {e}"
            )

        if looks_like_html(response):
            return ProbeResult(
                accepted=False,
                status_code=response.status_code,
                message=(
                    "Webhook endpoint returned HTML page instead of JSON. "
                    "Check the webhook URL."
                ),
            )
        if not formatter.is_success(response):
            return ProbeResult(
                accepted=False,
                status_code=response.status_code,
                message=f"Webhook endpoint returned status {response.status_code}",
            )
        return ProbeResult(
            accepted=True, status_code=response.status_code, message="Webhook verified"
        )
