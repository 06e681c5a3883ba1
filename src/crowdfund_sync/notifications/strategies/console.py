# -*- coding: utf-8 -*-
"""Alert channel that writes to stdout."""

from __future__ import annotations

from crowdfund_sync.config import Settings
from crowdfund_sync.notifications.strategies.base import BaseNotificationStrategy
from crowdfund_sync.notifications.types import NotificationMessage


class ConsoleNotifier(BaseNotificationStrategy):
    """Print rendered alerts, optionally limited to console.event_types."""

    def __init__(self, settings: "Settings") -> None:
        super().__init__(settings)
        self._open = False

    @property
    def is_running(self) -> bool:
        return self._open

    async def initialize(self) -> None:
        self._open = True

    async def shutdown(self) -> None:
        self._open = False

    def _wants(self, message: NotificationMessage) -> bool:
        cfg = self.settings.console
        if not (self._open and cfg.enabled):
            return False
        return not cfg.event_types or message.event_type in cfg.event_types

    async def send_notification(self, message: NotificationMessage) -> None:
        if self._wants(message):
            print(message.render_text(), flush=True)
