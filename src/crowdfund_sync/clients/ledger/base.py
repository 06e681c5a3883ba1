# -*- coding: utf-8 -*-
"""Ledger client interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional

from crowdfund_sync.models.ledger_event import LedgerEvent, LedgerEventType


@dataclass(frozen=True, slots=True)
class LedgerTxStatus:
    """What the ledger currently reports for one transaction."""

    finalized: bool
    success: bool
    raw_status: str
    block_height: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def pending(cls, raw_status: str = "pending") -> LedgerTxStatus:
        return cls(finalized=False, success=False, raw_status=raw_status)


class ILedgerClient(ABC):
    """Access to the external ledger: broadcast, status query and event feed."""

    @abstractmethod
    async def submit(self, signed_transfer: str) -> str:
        """Broadcast a signed transfer (hex). Returns the ledger-assigned tx id."""
        ...

    @abstractmethod
    async def query_status(self, tx_id: str) -> LedgerTxStatus:
        """Return the ledger's current view of tx_id. Unknown ids are pending."""
        ...

    @abstractmethod
    async def fetch_events(
        self,
        since_block: int,
        event_types: Optional[Iterable[LedgerEventType]] = None,
    ) -> list[LedgerEvent]:
        """Return events with block_height > since_block, optionally limited to event_types."""
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        return None
