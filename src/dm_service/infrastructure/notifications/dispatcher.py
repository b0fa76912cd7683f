"""In-process notification queue drained by a supervised background task."""
from __future__ import annotations

import asyncio
import logging

from dm_service.application.dto.notification import NotificationDTO
from dm_service.application.ports.notifications import NotificationSink

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Implements application.ports.notifications.NotificationQueue.

    enqueue() never waits: a full queue drops the notification with a warning.
    Sink failures are logged and the worker keeps draining.
    """

    def __init__(self, sink: NotificationSink, *, max_size: int = 1000) -> None:
        self._sink = sink
        self._queue: asyncio.Queue[NotificationDTO] = asyncio.Queue(maxsize=max_size)
        self._task: asyncio.Task[None] | None = None

    def enqueue(self, notification: NotificationDTO) -> bool:
        try:
            self._queue.put_nowait(notification)
        except asyncio.QueueFull:
            logger.warning(
                "Notification queue full, dropping notification for user %d",
                notification.recipient_id,
            )
            return False
        return True

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        self._task = asyncio.create_task(self._run(), name="notification-dispatcher")
        logger.info("Notification dispatcher started")

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.info(
                "Notification dispatcher stopped (%d undelivered)", self._queue.qsize(),
            )

    async def drain(self) -> None:
        """Wait until everything queued so far has been handed to the sink."""
        await self._queue.join()

    async def _run(self) -> None:
        while True:
            notification = await self._queue.get()
            try:
                await self._sink.write(notification)
            except Exception:
                logger.exception(
                    "Failed to write notification for user %d", notification.recipient_id,
                )
            finally:
                self._queue.task_done()
