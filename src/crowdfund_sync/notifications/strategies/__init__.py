"""Notification strategies."""

from crowdfund_sync.notifications.strategies.base import BaseNotificationStrategy
from crowdfund_sync.notifications.strategies.console import ConsoleNotifier

__all__ = [
    "BaseNotificationStrategy",
    "ConsoleNotifier",
]
