"""ContributionRecord: one confirmed contribution to a project.

tx_id is unique across all contributions and is the only deduplication
mechanism: whichever path (request-time confirmation or sync replay) inserts
first wins. Records are immutable once written.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class ContributionRecord:
    """A contribution of amount (smallest currency unit) to project_id."""

    id: UUID
    project_id: UUID
    contributor_address: str
    amount: int
    tx_id: str
    block_height: int
    """0 when the block is unknown at insert time."""
    created_at: datetime

    @classmethod
    def create(
        cls,
        project_id: UUID,
        contributor_address: str,
        amount: int,
        tx_id: str,
        block_height: int = 0,
        *,
        id: UUID | None = None,
        created_at: datetime | None = None,
    ) -> ContributionRecord:
        """Create a new record.

        Raises:
            ValueError: If amount <= 0 or block_height < 0.
        """
        if amount <= 0:
            raise ValueError("amount must be > 0")
        if block_height < 0:
            raise ValueError("block_height must be >= 0")
        return cls(
            id=id or uuid4(),
            project_id=project_id,
            contributor_address=contributor_address.strip(),
            amount=amount,
            tx_id=tx_id.strip(),
            block_height=block_height,
            created_at=created_at or datetime.now(timezone.utc),
        )
