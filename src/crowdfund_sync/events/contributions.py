"""Contribution events (emitted by ContributionRecorder)."""

from __future__ import annotations

from uuid import UUID

from bubus import BaseEvent  # type: ignore[import-untyped]


class ContributionRecordedEvent(BaseEvent[None]):
    """Emitted after a contribution and its project aggregate were written."""

    contribution_id: UUID
    project_id: UUID
    contributor_address: str
    amount: int
    tx_id: str
    block_height: int
    total_raised: int
    contributor_count: int
    project_status: str
