"""In-memory sync cursor repository (keyed by cursor name)."""

from __future__ import annotations

from crowdfund_sync.models.sync_cursor import SyncCursor
from crowdfund_sync.persistence.repositories.interfaces.sync_cursor_repository import (
    ISyncCursorRepository,
)


class InMemorySyncCursorRepository(ISyncCursorRepository):
    """In-memory implementation of ISyncCursorRepository."""

    def __init__(self) -> None:
        self._store: dict[str, SyncCursor] = {}

    async def get(self, name: str) -> SyncCursor | None:
        return self._store.get(name)

    async def save(self, cursor: SyncCursor) -> None:
        self._store[cursor.name] = cursor
