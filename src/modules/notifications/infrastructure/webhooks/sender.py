"""HTTP webhook delivery with retry.

重试规则：
- 5xx / 408 / 429 以及网络错误、超时可重试，其余 4xx 直接失败
- 退避 = min(base * 2^n, max) + 随机抖动（网络错误抖动更大）
- Discord 429 使用响应中的 retry_after，并拉长后续投递间隔
- 第 n 次重试的超时 = base_timeout + n * timeout_step
"""

import asyncio
import json
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx
from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
)

from src.core.config import settings
from src.core.infrastructure.logging import BusinessEvents
from src.modules.notifications.domain.entities import Webhook, WebhookPayload
from src.modules.notifications.domain.ports import WebhookDelivery
from src.modules.notifications.infrastructure.webhooks.formatters import (
    DiscordWebhookFormatter,
    WebhookFormatter,
    looks_like_html,
    select_formatter,
)
from src.modules.notifications.infrastructure.webhooks.signing import (
    SIGNATURE_HEADER,
    sign_payload,
)

RETRYABLE_STATUS_CODES = frozenset({0, 408, 429})


def is_retryable_status(status_code: int) -> bool:
    return status_code >= 500 or status_code in RETRYABLE_STATUS_CODES


class DeliveryError(Exception):
    """A delivery attempt that will not be retried."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RetryableDeliveryError(DeliveryError):
    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        network: bool = False,
        retry_after: float | None = None,
    ):
        super().__init__(message, status_code)
        self.network = network
        self.retry_after = retry_after


@dataclass(frozen=True)
class DeliveryPolicy:
    max_attempts: int = 5
    base_delay: float = 2.0
    max_delay: float = 30.0
    status_jitter: float = 3.0
    network_jitter: float = 5.0
    base_timeout: float = 45.0
    timeout_step: float = 5.0
    inter_delivery_delay: float = 0.5
    rate_limit_delay_step: float = 1.0
    max_inter_delivery_delay: float = 10.0
    user_agent: str = "Keyward-Webhook/1.0"

    @classmethod
    def from_settings(cls) -> "DeliveryPolicy":
        return cls(
            max_attempts=settings.WEBHOOK_MAX_ATTEMPTS,
            base_delay=settings.WEBHOOK_BASE_RETRY_DELAY_SEC,
            max_delay=settings.WEBHOOK_MAX_RETRY_DELAY_SEC,
            status_jitter=settings.WEBHOOK_STATUS_JITTER_SEC,
            network_jitter=settings.WEBHOOK_NETWORK_JITTER_SEC,
            base_timeout=settings.WEBHOOK_BASE_TIMEOUT_SEC,
            timeout_step=settings.WEBHOOK_TIMEOUT_STEP_SEC,
            inter_delivery_delay=settings.WEBHOOK_INTER_DELIVERY_DELAY_SEC,
            rate_limit_delay_step=settings.WEBHOOK_RATE_LIMIT_DELAY_STEP_SEC,
            max_inter_delivery_delay=settings.WEBHOOK_MAX_INTER_DELIVERY_DELAY_SEC,
            user_agent=settings.WEBHOOK_USER_AGENT,
        )

    def backoff(self, retry_index: int) -> float:
        """Delay before retry number ``retry_index + 1``, without jitter."""
        return min(self.base_delay * (2**retry_index), self.max_delay)

    def timeout_for(self, retry_index: int) -> float:
        return self.base_timeout + self.timeout_step * retry_index


def describe_failure(response: httpx.Response) -> str:
    if looks_like_html(response):
        return (
            "Webhook endpoint returned HTML page instead of JSON "
            f"(status {response.status_code}). Check the webhook URL."
        )
    text = response.text[:200]
    return f"HTTP {response.status_code}: {text}" if text else f"HTTP {response.status_code}"


class HttpWebhookDelivery(WebhookDelivery):
    """Posts payloads with httpx and retries through tenacity."""

    def __init__(
        self,
        policy: DeliveryPolicy | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.policy = policy or DeliveryPolicy.from_settings()
        self._transport = transport
        self._sleep = sleep
        self._inter_delivery_delay = self.policy.inter_delivery_delay

    @property
    def inter_delivery_delay(self) -> float:
        return self._inter_delivery_delay

    def _wait(self, retry_state: RetryCallState) -> float:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        retry_index = retry_state.attempt_number - 1
        if isinstance(error, RetryableDeliveryError) and error.retry_after is not None:
            return min(error.retry_after, self.policy.max_delay)
        jitter = self.policy.status_jitter
        if isinstance(error, RetryableDeliveryError) and error.network:
            jitter = self.policy.network_jitter
        return self.policy.backoff(retry_index) + random.uniform(0, jitter)

    def _note_rate_limit(self) -> None:
        self._inter_delivery_delay = min(
            self._inter_delivery_delay + self.policy.rate_limit_delay_step,
            self.policy.max_inter_delivery_delay,
        )
        logger.info(
            f"Discord rate limited, inter-delivery delay now {self._inter_delivery_delay}s"
        )

    async def _post(
        self,
        client: httpx.AsyncClient,
        webhook: Webhook,
        formatter: WebhookFormatter,
        payload: WebhookPayload,
        content: bytes,
        retry_index: int,
    ) -> httpx.Response:
        headers = formatter.headers(payload, retry_index, self.policy.user_agent)
        if webhook.secret:
            headers[SIGNATURE_HEADER] = sign_payload(webhook.secret, content)

        try:
            response = await client.post(
                webhook.url,
                content=content,
                headers=headers,
                timeout=self.policy.timeout_for(retry_index),
            )
        except httpx.TimeoutException as e:
            raise RetryableDeliveryError(f"Timeout: {e}", network=True) from e
        except httpx.TransportError as e:
            raise RetryableDeliveryError(f"Network error: {e}", network=True) from e

        if formatter.is_success(response):
            return response

        message = describe_failure(response)
        if is_retryable_status(response.status_code):
            retry_after = formatter.retry_after(response)
            if response.status_code == 429 and isinstance(
                formatter, DiscordWebhookFormatter
            ):
                self._note_rate_limit()
            raise RetryableDeliveryError(
                message, status_code=response.status_code, retry_after=retry_after
            )
        raise DeliveryError(message, status_code=response.status_code)

    async def send(self, webhook: Webhook, payload: WebhookPayload) -> bool:
        formatter = select_formatter(webhook.url)
        body = formatter.build_body(payload)
        # 只序列化一次：签名与发送使用同一份字节
        content = json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode(
            "utf-8"
        )

        attempts = 0
        try:
            async with httpx.AsyncClient(
                transport=self._transport, follow_redirects=False
            ) as client:
                retrying = AsyncRetrying(
                    retry=retry_if_exception_type(RetryableDeliveryError),
                    stop=stop_after_attempt(self.policy.max_attempts),
                    wait=self._wait,
                    sleep=self._sleep,
                    reraise=True,
                )
                async for attempt in retrying:
                    with attempt:
                        attempts = attempt.retry_state.attempt_number
                        response = await self._post(
                            client, webhook, formatter, payload, content, attempts - 1
                        )
        except DeliveryError as e:
            logger.warning(
                f"Webhook {webhook.id} delivery of {payload.event} failed "
                f"after {attempts} attempt(s): {e}"
            )
            BusinessEvents.webhook_delivery_failed(
                webhook_id=webhook.id,
                event=payload.event,
                attempts=attempts,
                error=str(e),
                status_code=e.status_code,
            )
            return False

        BusinessEvents.webhook_delivered(
            webhook_id=webhook.id,
            event=payload.event,
            attempts=attempts,
            status_code=response.status_code,
            formatter=formatter.name,
        )
        return True
