"""Crowdfund sync: ledger transaction tracking and chain-to-store event sync."""

from crowdfund_sync.clients import AsyncHttpClient, LedgerClient
from crowdfund_sync.config import get_settings
from crowdfund_sync.DI import Container
from crowdfund_sync.gateway import SyncGateway
from crowdfund_sync.services import (
    ContributionRecorder,
    SyncEngine,
    TransactionTracker,
)

__version__ = "0.1.0"
__all__ = [
    "AsyncHttpClient",
    "Container",
    "ContributionRecorder",
    "LedgerClient",
    "SyncEngine",
    "SyncGateway",
    "TransactionTracker",
    "get_settings",
]
