# -*- coding: utf-8 -*-
"""LedgerEvent: one contract event read from the ledger event feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional


class LedgerEventType(str, Enum):
    """Contract event kinds the sync engine replays."""

    PROJECT_CREATED = "ProjectCreated"
    CONTRIBUTION_MADE = "ContributionMade"
    FUNDS_WITHDRAWN = "FundsWithdrawn"
    REFUND_PROCESSED = "RefundProcessed"

    @classmethod
    def parse(cls, raw: str) -> LedgerEventType:
        """Accept the bare name or a qualified one (A.<address>.<Contract>.<Name>)."""
        return cls(raw.rsplit(".", 1)[-1])


def _pick(item: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if item.get(key) is not None:
            return item[key]
    return None


def _parse_timestamp(raw: Any) -> Optional[datetime]:
    if isinstance(raw, bool) or raw is None or raw == "":
        return None
    if isinstance(raw, (int, float)):
        return datetime.fromtimestamp(raw, tz=timezone.utc)
    return datetime.fromisoformat(str(raw).replace("Z", "+00:00"))


@dataclass(frozen=True, slots=True)
class LedgerEvent:
    """A ledger event. Ordered by (block_height, event_index)."""

    type: LedgerEventType
    block_height: int
    event_index: int
    """Position of the event within its block."""
    tx_id: str
    data: Mapping[str, Any] = field(default_factory=dict)
    block_timestamp: Optional[datetime] = None

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.block_height, self.event_index)

    @classmethod
    def from_response(cls, item: Mapping[str, Any]) -> LedgerEvent:
        """Build an event from one feed item (snake_case or camelCase keys).

        Raises:
            ValueError: If the type is unknown or a field is missing or malformed.
        """
        raw_type = _pick(item, "type", "event_type")
        raw_height = _pick(item, "block_height", "blockHeight")
        tx_id = str(_pick(item, "tx_id", "transactionId", "txId") or "").strip()
        if raw_type is None or raw_height is None or not tx_id:
            raise ValueError("event requires type, block height and transaction id")
        block_height = int(raw_height)
        event_index = int(_pick(item, "event_index", "eventIndex") or 0)
        if block_height < 0 or event_index < 0:
            raise ValueError("block_height and event_index must be >= 0")
        data = item.get("data") or {}
        if not isinstance(data, Mapping):
            raise ValueError("data must be an object")
        return cls(
            type=LedgerEventType.parse(str(raw_type)),
            block_height=block_height,
            event_index=event_index,
            tx_id=tx_id,
            data=dict(data),
            block_timestamp=_parse_timestamp(_pick(item, "block_time", "blockTimestamp")),
        )
