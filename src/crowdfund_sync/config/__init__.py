"""Configuration subpackage."""

from crowdfund_sync.config.config import (
    AppSettings,
    ConsoleNotificationSettings,
    LedgerSettings,
    LoggingSettings,
    Settings,
    SyncSettings,
    TrackerSettings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "ConsoleNotificationSettings",
    "LedgerSettings",
    "LoggingSettings",
    "Settings",
    "SyncSettings",
    "TrackerSettings",
    "get_settings",
]
