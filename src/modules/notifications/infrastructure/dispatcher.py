"""Background notification dispatch.

``NotificationDispatcher.notify`` schedules delivery on the running event
loop and returns immediately, so client API latency never depends on
webhook targets. Shutdown drains the pending tasks with a timeout.
Request handlers reach it through ``TransactionalNotifier``, which defers
scheduling until the request transaction has committed.
"""

import asyncio
from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from functools import partial

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.infrastructure.database.session import (
    get_async_session,
    run_after_commit,
)
from src.modules.notifications.application.service import NotificationService
from src.modules.notifications.domain.entities import NotificationRequest
from src.modules.notifications.domain.ports import Notifier, WebhookDelivery
from src.modules.notifications.infrastructure.mappers import (
    ActivityLogMapper,
    WebhookMapper,
)
from src.modules.notifications.infrastructure.repositories import (
    PostgreSQLActivityLogRepository,
    PostgreSQLWebhookRepository,
)

DeliverFn = Callable[[NotificationRequest], Awaitable[object]]


class NotificationDispatcher(Notifier):
    def __init__(self, deliver: DeliverFn):
        self._deliver = deliver
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def notify(self, request: NotificationRequest) -> None:
        task = asyncio.get_running_loop().create_task(self._run(request))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, request: NotificationRequest) -> None:
        try:
            await self._deliver(request)
        except Exception as e:
            logger.exception(
                f"Notification for {request.event.value} "
                f"(application {request.application_id}) failed: {e}"
            )

    async def drain(self, timeout: float) -> None:
        if not self._tasks:
            return
        logger.info(f"Draining {len(self._tasks)} pending notification(s)")
        _, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning(f"Cancelled {len(pending)} notification(s) at shutdown")


class TransactionalNotifier(Notifier):
    """Holds notifications until the request transaction commits.

    回滚的请求不会产生 webhook 或活动日志。
    """

    def __init__(self, session: AsyncSession, target: Notifier):
        self._session = session
        self._target = target

    def notify(self, request: NotificationRequest) -> None:
        run_after_commit(self._session, partial(self._target.notify, request))


def build_session_delivery(
    delivery: WebhookDelivery,
    session_factory: Callable[
        [], AbstractAsyncContextManager[AsyncSession]
    ] = get_async_session,
) -> DeliverFn:
    """Delivery callable that opens its own database session per outcome.

    The activity log write and the webhook lookup share one short
    transaction; HTTP delivery runs after it is committed.
    """

    async def deliver(request: NotificationRequest) -> tuple[int, int]:
        async with session_factory() as session:
            service = NotificationService(
                PostgreSQLActivityLogRepository(session, ActivityLogMapper()),
                PostgreSQLWebhookRepository(session, WebhookMapper()),
                delivery,
            )
            async with session.begin():
                await service.record_activity(request)
                webhooks = await service.subscribed_webhooks(request)
        return await service.fan_out(request, webhooks)

    return deliver
