# -*- coding: utf-8 -*-
"""TransactionRecord: one submitted ledger transaction and its confirmation status.

Identity is tx_id (ledger-assigned). Created once in PENDING and moved at most
once to a terminal state (CONFIRMED xor FAILED). Never re-opened, never deleted.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID

from crowdfund_sync.exceptions import InvalidStatusTransitionError


class TransactionKind(str, Enum):
    """What the submitted transfer does on the ledger."""

    CREATE_PROJECT = "create_project"
    CONTRIBUTE = "contribute"
    WITHDRAW = "withdraw"
    REFUND = "refund"


class TransactionStatus(str, Enum):
    """Confirmation state of a transaction."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not TransactionStatus.PENDING


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """Audit-trail row for a submitted ledger transaction."""

    tx_id: str
    kind: TransactionKind
    initiator: str
    """Wallet address that signed the transfer."""
    status: TransactionStatus
    created_at: datetime
    updated_at: datetime
    subject_project_id: Optional[UUID] = None
    error_message: Optional[str] = None
    block_height: Optional[int] = None
    """Block the transaction was finalized in, when known."""

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def with_status(
        self,
        status: TransactionStatus,
        *,
        error_message: Optional[str] = None,
        block_height: Optional[int] = None,
        updated_at: Optional[datetime] = None,
    ) -> TransactionRecord:
        """Return a copy moved to status.

        Raises:
            InvalidStatusTransitionError: If this record is already terminal, or
                status is PENDING.
        """
        if self.is_terminal or status is TransactionStatus.PENDING:
            raise InvalidStatusTransitionError("transaction", self.status.value, status.value)
        return replace(
            self,
            status=status,
            error_message=error_message,
            block_height=block_height if block_height is not None else self.block_height,
            updated_at=updated_at or datetime.now(timezone.utc),
        )

    @classmethod
    def create(
        cls,
        tx_id: str,
        kind: TransactionKind,
        initiator: str,
        subject_project_id: Optional[UUID] = None,
        *,
        created_at: Optional[datetime] = None,
    ) -> TransactionRecord:
        """Create a new PENDING record."""
        tx_id = tx_id.strip()
        if not tx_id:
            raise ValueError("tx_id must be non-empty")
        now = created_at or datetime.now(timezone.utc)
        return cls(
            tx_id=tx_id,
            kind=kind,
            initiator=initiator.strip(),
            status=TransactionStatus.PENDING,
            created_at=now,
            updated_at=now,
            subject_project_id=subject_project_id,
        )
