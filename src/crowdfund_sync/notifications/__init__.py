"""Notification subsystem."""

from crowdfund_sync.notifications.notification_manager import NotificationService
from crowdfund_sync.notifications.strategies import BaseNotificationStrategy, ConsoleNotifier
from crowdfund_sync.notifications.types import NotificationMessage

__all__ = [
    "BaseNotificationStrategy",
    "ConsoleNotifier",
    "NotificationMessage",
    "NotificationService",
]
