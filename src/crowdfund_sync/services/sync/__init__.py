"""Ledger event sync."""

from crowdfund_sync.services.sync.report import SyncReport
from crowdfund_sync.services.sync.sync_engine import SyncEngine, SyncScope

__all__ = ["SyncEngine", "SyncReport", "SyncScope"]
