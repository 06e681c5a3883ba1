"""In-memory transaction repository (keyed by tx_id)."""

from __future__ import annotations

from uuid import UUID

from crowdfund_sync.exceptions.store_exceptions import DuplicateKeyError, RecordNotFoundError
from crowdfund_sync.models.transaction_record import TransactionRecord
from crowdfund_sync.persistence.repositories.interfaces.transaction_repository import (
    ITransactionRepository,
)


def _newest_first(records: list[TransactionRecord]) -> list[TransactionRecord]:
    return sorted(records, key=lambda r: r.created_at, reverse=True)


class InMemoryTransactionRepository(ITransactionRepository):
    """In-memory implementation of ITransactionRepository."""

    def __init__(self) -> None:
        """Initialize an empty in-memory store."""
        self._store: dict[str, TransactionRecord] = {}

    async def get(self, tx_id: str) -> TransactionRecord | None:
        return self._store.get(tx_id.strip())

    async def insert(self, record: TransactionRecord) -> None:
        if record.tx_id in self._store:
            raise DuplicateKeyError("transactions", "tx_id", record.tx_id)
        self._store[record.tx_id] = record

    async def save(self, record: TransactionRecord) -> None:
        if record.tx_id not in self._store:
            raise RecordNotFoundError("transactions", record.tx_id)
        self._store[record.tx_id] = record

    async def list_by_initiator(self, wallet: str) -> list[TransactionRecord]:
        wallet = wallet.strip()
        return _newest_first([r for r in self._store.values() if r.initiator == wallet])

    async def list_by_project(self, project_id: UUID) -> list[TransactionRecord]:
        return _newest_first([r for r in self._store.values() if r.subject_project_id == project_id])
