# -*- coding: utf-8 -*-
"""Application services."""

from crowdfund_sync.services.contribution import (
    ContributionConfirmationService,
    ContributionRecorder,
)
from crowdfund_sync.services.notifications import SyncAlertNotifier
from crowdfund_sync.services.project_state import ProjectStateUpdater
from crowdfund_sync.services.sync import SyncEngine, SyncReport
from crowdfund_sync.services.transaction_tracker import TransactionTracker

__all__ = [
    "ContributionConfirmationService",
    "ContributionRecorder",
    "ProjectStateUpdater",
    "SyncAlertNotifier",
    "SyncEngine",
    "SyncReport",
    "TransactionTracker",
]
