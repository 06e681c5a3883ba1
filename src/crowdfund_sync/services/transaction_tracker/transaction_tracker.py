# -*- coding: utf-8 -*-
"""TransactionTracker: follows submitted ledger transactions to confirmed or failed.

State machine per transaction: pending -> confirmed | failed. Terminal states
are final; a later poll that disagrees is logged and ignored. Every transition
is broadcast to status observers and dispatched on the event bus.
"""

from __future__ import annotations

import asyncio
import time
import weakref
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

import structlog

from crowdfund_sync.clients.ledger.base import ILedgerClient, LedgerTxStatus
from crowdfund_sync.config import Settings
from crowdfund_sync.events.transactions import TransactionStatusChangedEvent
from crowdfund_sync.exceptions import TransactionNotFoundError, ValidationFailedError
from crowdfund_sync.exceptions.store_exceptions import DuplicateKeyError
from crowdfund_sync.models.transaction_record import (
    TransactionKind,
    TransactionRecord,
    TransactionStatus,
)
from crowdfund_sync.persistence.repositories.interfaces.transaction_repository import (
    ITransactionRepository,
)
from crowdfund_sync.utils.backoff import retry_with_backoff
from crowdfund_sync.utils.subscribers import SubscriberRegistry, Unsubscribe
from crowdfund_sync.utils.validation import is_tx_id, is_wallet_address, mask_address

if TYPE_CHECKING:
    from bubus import EventBus  # type: ignore[import-untyped]

MAX_POLLING_ATTEMPTS_MESSAGE = "Max polling attempts reached"


class _StillPending(Exception):
    """Internal signal: the ledger has not finalized the transaction yet."""


class TransactionTracker:
    """Polls the ledger for transaction finality and persists the outcome.

    Query failures during polling count as "still pending"; they never escape
    poll_once, wait_until_terminal or poll_and_persist.
    """

    def __init__(
        self,
        ledger: ILedgerClient,
        transaction_repository: ITransactionRepository,
        settings: Settings,
        *,
        event_bus: Optional[Any] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the tracker.

        Args:
            ledger: Ledger client used for submit and status queries.
            transaction_repository: Store for TransactionRecord.
            settings: Application settings (uses settings.tracker and settings.ledger).
            event_bus: Optional; if set, TransactionStatusChangedEvent is dispatched on every transition.
            sleep: Suspension function (injected for tests).
            clock: Monotonic clock in seconds (injected for tests).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._ledger = ledger
        self._repository = transaction_repository
        self._settings = settings
        self._event_bus: Optional["EventBus"] = event_bus
        self._sleep = sleep
        self._clock = clock
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._observers: SubscriberRegistry[TransactionRecord] = SubscriberRegistry(
            "transaction_status", get_logger=get_logger
        )
        # Terminal writes are serialized per tx_id.
        self._persist_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._tasks: dict[str, asyncio.Task[TransactionStatus]] = {}

    def on_status_change(
        self, callback: Callable[[TransactionRecord], Any]
    ) -> Unsubscribe:
        """Register callback for transitions to confirmed/failed. Returns an unsubscribe function."""
        return self._observers.subscribe(callback)

    def explorer_url(self, tx_id: str) -> str:
        """Return the block explorer link for tx_id."""
        return self._settings.ledger.explorer_url_template.format(tx_id=tx_id)

    async def submit(
        self,
        signed_transfer: str,
        kind: TransactionKind,
        initiator: str,
        subject_project_id: Optional[UUID] = None,
    ) -> TransactionRecord:
        """Broadcast a signed transfer and start its pending record."""
        if not is_wallet_address(initiator):
            raise ValidationFailedError(f"Invalid wallet address: {initiator!r}")
        tx_id = await self._ledger.submit(signed_transfer)
        return await self.create_transaction(tx_id, kind, initiator, subject_project_id)

    async def create_transaction(
        self,
        tx_id: str,
        kind: TransactionKind,
        initiator: str,
        subject_project_id: Optional[UUID] = None,
    ) -> TransactionRecord:
        """Create the pending record for tx_id. Returns the existing record if already tracked.

        Raises:
            ValidationFailedError: If tx_id or initiator is malformed.
        """
        if not is_tx_id(tx_id):
            raise ValidationFailedError(f"Invalid transaction id: {tx_id!r}")
        if not is_wallet_address(initiator):
            raise ValidationFailedError(f"Invalid wallet address: {initiator!r}")
        record = TransactionRecord.create(tx_id, kind, initiator, subject_project_id)
        try:
            await self._repository.insert(record)
        except DuplicateKeyError:
            existing = await self._repository.get(record.tx_id)
            if existing is None:
                raise
            self._logger.debug("transaction_already_tracked", tx_id=record.tx_id)
            return existing
        self._logger.info(
            "transaction_created",
            tx_id=record.tx_id,
            transaction_kind=kind.value,
            initiator=mask_address(initiator),
            project_id=str(subject_project_id) if subject_project_id else None,
        )
        return record

    async def get_transaction(self, tx_id: str) -> Optional[TransactionRecord]:
        return await self._repository.get(tx_id)

    async def list_by_wallet(self, wallet: str) -> list[TransactionRecord]:
        """Transactions initiated by wallet, newest first."""
        return await self._repository.list_by_initiator(wallet)

    async def list_by_project(self, project_id: UUID) -> list[TransactionRecord]:
        """Transactions about project_id, newest first."""
        return await self._repository.list_by_project(project_id)

    async def _check(self, tx_id: str) -> LedgerTxStatus:
        try:
            return await self._ledger.query_status(tx_id)
        except Exception as e:
            self._logger.warning(
                "transaction_poll_failed",
                tx_id=tx_id,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return LedgerTxStatus.pending("query_failed")

    async def poll_once(self, tx_id: str) -> TransactionStatus:
        """Query the ledger once and map the answer. Does not persist.

        Finalized success is CONFIRMED, finalized failure is FAILED, anything
        else (including a failed query) is PENDING.
        """
        result = await self._check(tx_id)
        if not result.finalized:
            return TransactionStatus.PENDING
        return TransactionStatus.CONFIRMED if result.success else TransactionStatus.FAILED

    async def wait_until_terminal(
        self,
        tx_id: str,
        timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
    ) -> TransactionStatus:
        """Poll at a fixed interval until the ledger finalizes tx_id or timeout elapses.

        The poll made once the timeout is reached is the final check. If it is
        still pending the local record is set to FAILED (the ledger is not
        touched) and FAILED is returned. Never returns PENDING.
        """
        cfg = self._settings.tracker
        timeout = cfg.wait_timeout_seconds if timeout is None else timeout
        poll_interval = cfg.wait_poll_interval_seconds if poll_interval is None else poll_interval

        existing = await self._repository.get(tx_id)
        if existing is not None and existing.is_terminal:
            return existing.status

        deadline = self._clock() + timeout
        while True:
            result = await self._check(tx_id)
            if result.finalized:
                return await self._settle(tx_id, result)
            remaining = deadline - self._clock()
            if remaining <= 0:
                break
            await self._sleep(min(poll_interval, remaining))

        self._logger.warning("transaction_wait_timed_out", tx_id=tx_id, timeout_seconds=timeout)
        return await self._persist_terminal(
            tx_id,
            TransactionStatus.FAILED,
            error_message=f"Transaction not finalized within {timeout:g} seconds",
        )

    async def poll_and_persist(
        self,
        tx_id: str,
        max_attempts: Optional[int] = None,
    ) -> TransactionStatus:
        """Poll with exponential backoff between attempts and persist the outcome.

        Exhausting max_attempts while pending persists FAILED with
        "Max polling attempts reached".
        """
        cfg = self._settings.tracker
        attempts = cfg.max_poll_attempts if max_attempts is None else max_attempts

        async def _attempt() -> LedgerTxStatus:
            result = await self._check(tx_id)
            if not result.finalized:
                raise _StillPending(tx_id)
            return result

        try:
            result = await retry_with_backoff(
                _attempt,
                attempts,
                cfg.backoff_initial_seconds,
                cfg.backoff_max_seconds,
                cfg.backoff_multiplier,
                retry_on=(_StillPending,),
                operation_name="poll_transaction",
                sleep=self._sleep,
                logger=self._logger,
            )
        except _StillPending:
            return await self._persist_terminal(
                tx_id,
                TransactionStatus.FAILED,
                error_message=MAX_POLLING_ATTEMPTS_MESSAGE,
            )
        return await self._settle(tx_id, result)

    async def track_transaction(self, tx_id: str, *, wait: bool = True) -> TransactionRecord:
        """Return the record for tx_id, waiting for finality when wait is True.

        With wait False a background poll_and_persist is started and the
        current (possibly pending) record is returned.

        Raises:
            TransactionNotFoundError: If tx_id is not tracked.
        """
        record = await self._repository.get(tx_id)
        if record is None:
            raise TransactionNotFoundError(tx_id)
        if record.is_terminal:
            return record
        if wait:
            await self.wait_until_terminal(tx_id)
        else:
            self.start_tracking(tx_id)
        return await self._repository.get(tx_id) or record

    def start_tracking(self, tx_id: str) -> asyncio.Task[TransactionStatus]:
        """Run poll_and_persist(tx_id) in the background. One task per tx_id."""
        task = self._tasks.get(tx_id)
        if task is not None and not task.done():
            return task
        task = asyncio.create_task(self.poll_and_persist(tx_id), name=f"track:{tx_id}")
        self._tasks[tx_id] = task
        task.add_done_callback(lambda t: self._on_task_done(tx_id, t))
        return task

    def _on_task_done(self, tx_id: str, task: asyncio.Task[TransactionStatus]) -> None:
        if self._tasks.get(tx_id) is task:
            del self._tasks[tx_id]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._logger.error(
                "transaction_tracking_task_failed",
                tx_id=tx_id,
                error_type=type(exc).__name__,
                error_message=str(exc),
            )

    async def aclose(self) -> None:
        """Cancel background tracking tasks and wait for them to finish."""
        tasks = list(self._tasks.values())
        for t in tasks:
            t.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    async def _settle(self, tx_id: str, result: LedgerTxStatus) -> TransactionStatus:
        if result.success:
            return await self._persist_terminal(
                tx_id, TransactionStatus.CONFIRMED, block_height=result.block_height
            )
        return await self._persist_terminal(
            tx_id,
            TransactionStatus.FAILED,
            error_message=result.error or f"Transaction failed: {result.raw_status}",
            block_height=result.block_height,
        )

    def _persist_lock_for(self, tx_id: str) -> asyncio.Lock:
        lock = self._persist_locks.get(tx_id)
        if lock is None:
            lock = asyncio.Lock()
            self._persist_locks[tx_id] = lock
        return lock

    async def _persist_terminal(
        self,
        tx_id: str,
        status: TransactionStatus,
        *,
        error_message: Optional[str] = None,
        block_height: Optional[int] = None,
    ) -> TransactionStatus:
        """Move the record to status once. Returns the status actually stored."""
        async with self._persist_lock_for(tx_id):
            record = await self._repository.get(tx_id)
            if record is None:
                self._logger.warning(
                    "transaction_record_missing",
                    tx_id=tx_id,
                    transaction_status=status.value,
                )
                return status
            if record.is_terminal:
                if record.status is not status:
                    self._logger.warning(
                        "transaction_already_terminal",
                        tx_id=tx_id,
                        transaction_status=record.status.value,
                        transaction_ignored_status=status.value,
                    )
                return record.status
            updated = record.with_status(
                status, error_message=error_message, block_height=block_height
            )
            await self._repository.save(updated)

        if status is TransactionStatus.CONFIRMED:
            self._logger.info("transaction_confirmed", tx_id=tx_id, block_height=block_height)
        else:
            self._logger.warning("transaction_failed", tx_id=tx_id, error_message=error_message)
        await self._broadcast(updated)
        return updated.status

    async def _broadcast(self, record: TransactionRecord) -> None:
        await self._observers.publish(record)
        if self._event_bus is None:
            return
        self._event_bus.dispatch(
            TransactionStatusChangedEvent(
                tx_id=record.tx_id,
                kind=record.kind.value,
                initiator=record.initiator,
                status=record.status.value,
                subject_project_id=record.subject_project_id,
                error_message=record.error_message,
                block_height=record.block_height,
            )
        )
