# -*- coding: utf-8 -*-
"""Contract every alert channel implements."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from crowdfund_sync.notifications.types import NotificationMessage

if TYPE_CHECKING:  # pragma: no cover
    from crowdfund_sync.config.config import Settings


class BaseNotificationStrategy(ABC):
    """An alert channel (console, chat, email, ...).

    NotificationService calls initialize() once, send_notification() per
    alert from its worker task, and shutdown() after the queue is drained.
    """

    def __init__(self, settings: "Settings"):
        self.settings = settings

    @property
    @abstractmethod
    def is_running(self) -> bool: ...

    @abstractmethod
    async def initialize(self) -> None: ...

    @abstractmethod
    async def shutdown(self) -> None: ...

    @abstractmethod
    async def send_notification(self, message: NotificationMessage) -> None:
        """Deliver one alert. Exceptions are logged by the caller."""
