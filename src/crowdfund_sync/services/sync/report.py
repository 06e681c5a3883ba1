"""SyncReport: what one sync run replayed."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class SyncReport:
    """Counts for one completed sync run.

    already_synced counts contributions that another path had recorded first.
    skipped counts events for projects unknown to the local store.
    """

    scope: str
    from_block: int
    to_block: Optional[int] = None
    """Highest block replayed; None when there was nothing new."""
    projects_synced: int = 0
    contributions_synced: int = 0
    withdrawals_synced: int = 0
    refunds_synced: int = 0
    already_synced: int = 0
    skipped: int = 0

    @property
    def events_processed(self) -> int:
        return (
            self.projects_synced
            + self.contributions_synced
            + self.withdrawals_synced
            + self.refunds_synced
            + self.already_synced
            + self.skipped
        )
