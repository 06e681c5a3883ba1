"""Transaction confirmation events (emitted by TransactionTracker)."""

from __future__ import annotations

from uuid import UUID

from bubus import BaseEvent  # type: ignore[import-untyped]


class TransactionStatusChangedEvent(BaseEvent[None]):
    """Emitted once when a transaction reaches confirmed or failed."""

    tx_id: str
    kind: str
    initiator: str
    status: str
    """confirmed or failed."""
    subject_project_id: UUID | None = None
    error_message: str | None = None
    block_height: int | None = None
