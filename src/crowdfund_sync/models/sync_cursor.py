"""SyncCursor: last ledger block whose events were fully replayed, per named stream."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True, slots=True)
class SyncCursor:
    """Cursor for one sync stream ("all", or one per event type)."""

    name: str
    last_synced_block: int
    updated_at: datetime

    def advanced_to(self, block_height: int, *, updated_at: datetime | None = None) -> SyncCursor:
        """Return a copy moved forward to block_height. Never moves backwards."""
        return SyncCursor(
            name=self.name,
            last_synced_block=max(self.last_synced_block, block_height),
            updated_at=updated_at or datetime.now(timezone.utc),
        )

    @classmethod
    def initial(cls, name: str, start_block: int = 0) -> SyncCursor:
        return cls(name=name, last_synced_block=start_block, updated_at=datetime.now(timezone.utc))
