# -*- coding: utf-8 -*-
"""Abstract interface for transaction record storage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from crowdfund_sync.models.transaction_record import TransactionRecord


class ITransactionRepository(ABC):
    """Interface for persisting TransactionRecord (keyed by tx_id)."""

    @abstractmethod
    async def get(self, tx_id: str) -> Optional[TransactionRecord]:
        """Return the record for tx_id, or None if missing."""
        ...

    @abstractmethod
    async def insert(self, record: TransactionRecord) -> None:
        """Insert a new record.

        Raises:
            DuplicateKeyError: If a record with the same tx_id exists.
        """
        ...

    @abstractmethod
    async def save(self, record: TransactionRecord) -> None:
        """Replace an existing record (by tx_id).

        Raises:
            RecordNotFoundError: If no record with that tx_id exists.
        """
        ...

    @abstractmethod
    async def list_by_initiator(self, wallet: str) -> list[TransactionRecord]:
        """Return records initiated by wallet, newest first."""
        ...

    @abstractmethod
    async def list_by_project(self, project_id: UUID) -> list[TransactionRecord]:
        """Return records whose subject is project_id, newest first."""
        ...
