"""UserRecord: a wallet known to the local store."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True, slots=True)
class UserRecord:
    wallet_address: str
    created_at: datetime

    @classmethod
    def create(cls, wallet_address: str, *, created_at: datetime | None = None) -> UserRecord:
        wallet_address = wallet_address.strip()
        if not wallet_address:
            raise ValueError("wallet_address must be non-empty")
        return cls(wallet_address=wallet_address, created_at=created_at or datetime.now(timezone.utc))
