"""Sync engine events."""

from __future__ import annotations

from datetime import datetime

from bubus import BaseEvent  # type: ignore[import-untyped]


class SyncCycleFailedEvent(BaseEvent[None]):
    """Emitted when a sync operation fails after all retry attempts."""

    operation: str
    """sync_all, sync_projects, sync_contributions, sync_withdrawals or sync_refunds."""
    error_type: str
    error_message: str
    last_synced_block: int
    failed_at: datetime
