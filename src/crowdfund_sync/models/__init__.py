# -*- coding: utf-8 -*-
"""Domain models."""

from crowdfund_sync.models.contribution_record import ContributionRecord
from crowdfund_sync.models.contribution_stats import ContributionStats
from crowdfund_sync.models.ledger_event import LedgerEvent, LedgerEventType
from crowdfund_sync.models.project import Project, ProjectStatus
from crowdfund_sync.models.sync_cursor import SyncCursor
from crowdfund_sync.models.transaction_record import (
    TransactionKind,
    TransactionRecord,
    TransactionStatus,
)
from crowdfund_sync.models.user import UserRecord

__all__ = [
    "ContributionRecord",
    "ContributionStats",
    "LedgerEvent",
    "LedgerEventType",
    "Project",
    "ProjectStatus",
    "SyncCursor",
    "TransactionKind",
    "TransactionRecord",
    "TransactionStatus",
    "UserRecord",
]
