"""Operator alert delivery: one queue, one worker, many channels."""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Callable, Sequence
from typing import Any, Optional

import structlog

from crowdfund_sync.notifications.strategies import BaseNotificationStrategy
from crowdfund_sync.notifications.types import NotificationMessage


class NotificationService:
    """Deliver sync and transaction alerts to every configured channel.

    notify() is synchronous so bus handlers can call it directly; delivery
    happens on a background worker started by initialize(). A channel that
    raises is logged and skipped for that message only. shutdown() drains
    whatever is queued before closing the channels.
    """

    def __init__(
        self,
        notifiers: Sequence[BaseNotificationStrategy],
        *,
        queue_size: int = 1000,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._channels = tuple(notifiers)
        self._queue_size = queue_size
        self._queue: Optional[asyncio.Queue[NotificationMessage]] = None
        self._worker: Optional[asyncio.Task[None]] = None
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self.delivered: Counter[str] = Counter()
        self.dropped: Counter[str] = Counter()

    @property
    def channels(self) -> tuple[BaseNotificationStrategy, ...]:
        return self._channels

    async def initialize(self) -> None:
        for channel in self._channels:
            await channel.initialize()
        if not self._channels:
            self._logger.info("alerts_disabled_no_channels")
            return
        self._queue = asyncio.Queue(maxsize=self._queue_size)
        self._worker = asyncio.create_task(self._deliver_forever(self._queue))
        self._logger.debug(
            "alerts_started",
            alert_channels=[type(c).__name__ for c in self._channels],
            alert_queue_size=self._queue_size,
        )

    async def shutdown(self) -> None:
        queue, worker = self._queue, self._worker
        self._queue, self._worker = None, None
        if queue is not None:
            queue.shutdown()
            await queue.join()
        if worker is not None:
            await worker
        for channel in self._channels:
            await channel.shutdown()
        self._logger.debug(
            "alerts_stopped",
            alert_delivered=sum(self.delivered.values()),
            alert_dropped=sum(self.dropped.values()),
        )

    def notify(self, message: NotificationMessage) -> None:
        """Queue message for delivery; drops it (with a warning) when the queue is full."""
        if not self._channels:
            return
        if self._queue is None:
            raise RuntimeError("NotificationService not initialized")
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            self.dropped[message.event_type] += 1
            self._logger.warning("alert_dropped_queue_full", alert_event_type=message.event_type)

    async def _deliver_forever(self, queue: asyncio.Queue[NotificationMessage]) -> None:
        while True:
            try:
                message = await queue.get()
            except asyncio.QueueShutDown:
                return
            try:
                await self._fan_out(message)
            finally:
                queue.task_done()

    async def _fan_out(self, message: NotificationMessage) -> None:
        for channel in self._channels:
            try:
                await channel.send_notification(message)
            except Exception as e:
                self._logger.exception(
                    "alert_channel_failed",
                    alert_event_type=message.event_type,
                    alert_channel=type(channel).__name__,
                    error_type=type(e).__name__,
                )
                continue
            self.delivered[message.event_type] += 1
