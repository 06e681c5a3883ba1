# -*- coding: utf-8 -*-
"""Abstract interface for sync cursor storage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from crowdfund_sync.models.sync_cursor import SyncCursor


class ISyncCursorRepository(ABC):
    """Interface for persisting SyncCursor (keyed by name). Single writer: the sync engine."""

    @abstractmethod
    async def get(self, name: str) -> Optional[SyncCursor]:
        ...

    @abstractmethod
    async def save(self, cursor: SyncCursor) -> None:
        """Insert or update a cursor (by name)."""
        ...
