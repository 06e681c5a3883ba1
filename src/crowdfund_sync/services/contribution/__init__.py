"""Contribution recording services."""

from crowdfund_sync.services.contribution.aggregates import compute_stats, recompute_aggregate
from crowdfund_sync.services.contribution.confirmation import ContributionConfirmationService
from crowdfund_sync.services.contribution.contribution_recorder import ContributionRecorder

__all__ = [
    "ContributionConfirmationService",
    "ContributionRecorder",
    "compute_stats",
    "recompute_aggregate",
]
