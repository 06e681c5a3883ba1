"""Notification subscribers."""

from crowdfund_sync.services.notifications.sync_alert_notifier import SyncAlertNotifier

__all__ = ["SyncAlertNotifier"]
