# -*- coding: utf-8 -*-
"""SyncEngine: replays ledger events into the local store from a persisted cursor.

One cycle: fetch events after the cursor, sort by (block_height, event_index),
replay in that order, then move the cursor to the highest replayed block. If
anything fails the cursor stays put, so the next cycle starts over from the
same position; replay is idempotent per event.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Literal, Optional
from uuid import UUID

import structlog

from crowdfund_sync.clients.ledger.base import ILedgerClient
from crowdfund_sync.config import Settings
from crowdfund_sync.events.sync import SyncCycleFailedEvent
from crowdfund_sync.exceptions import (
    DuplicateTransactionError,
    ProjectNotFoundError,
    TransientError,
    ValidationFailedError,
)
from crowdfund_sync.models.ledger_event import LedgerEvent, LedgerEventType
from crowdfund_sync.models.sync_cursor import SyncCursor
from crowdfund_sync.persistence.repositories.interfaces.project_repository import (
    IProjectRepository,
)
from crowdfund_sync.persistence.repositories.interfaces.sync_cursor_repository import (
    ISyncCursorRepository,
)
from crowdfund_sync.services.contribution.contribution_recorder import ContributionRecorder
from crowdfund_sync.services.project_state.project_state_updater import ProjectStateUpdater
from crowdfund_sync.services.sync.report import SyncReport
from crowdfund_sync.utils.backoff import retry_with_backoff
from crowdfund_sync.utils.subscribers import SubscriberRegistry, Unsubscribe
from crowdfund_sync.utils.units import to_base_units

if TYPE_CHECKING:
    from bubus import EventBus  # type: ignore[import-untyped]

SyncScope = Literal["all", "projects", "contributions", "withdrawals", "refunds"]

# scope -> (operation name for logs, event types; None means every type)
_SCOPES: dict[str, tuple[str, Optional[frozenset[LedgerEventType]]]] = {
    "all": ("sync_all", None),
    "projects": ("sync_projects", frozenset({LedgerEventType.PROJECT_CREATED})),
    "contributions": ("sync_contributions", frozenset({LedgerEventType.CONTRIBUTION_MADE})),
    "withdrawals": ("sync_withdrawals", frozenset({LedgerEventType.FUNDS_WITHDRAWN})),
    "refunds": ("sync_refunds", frozenset({LedgerEventType.REFUND_PROCESSED})),
}

_RETRYABLE: tuple[type[BaseException], ...] = (TransientError, ConnectionError, TimeoutError)


class SyncEngine:
    """Recurring ledger-to-store sync with backoff, a persisted cursor and error observers.

    Cycles are serialized per instance: a manual trigger waits for a scheduled
    cycle in flight and vice versa. Only transient failures are retried.
    """

    def __init__(
        self,
        ledger: ILedgerClient,
        recorder: ContributionRecorder,
        project_state: ProjectStateUpdater,
        project_repository: IProjectRepository,
        cursor_repository: ISyncCursorRepository,
        settings: Settings,
        *,
        event_bus: Optional[Any] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the engine.

        Args:
            ledger: Source of ledger events.
            recorder: Writes replayed contributions (idempotent on tx id).
            project_state: Applies project creation and status events.
            project_repository: Resolves ledger project ids to local projects.
            cursor_repository: Persists the per-scope sync cursors.
            settings: Application settings (uses settings.sync and settings.ledger).
            event_bus: Optional; if set, SyncCycleFailedEvent is dispatched on exhausted failures.
            sleep: Suspension used between retry attempts (injected for tests).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._ledger = ledger
        self._recorder = recorder
        self._project_state = project_state
        self._projects = project_repository
        self._cursors = cursor_repository
        self._settings = settings
        self._event_bus: Optional["EventBus"] = event_bus
        self._sleep = sleep
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._error_observers: SubscriberRegistry[Exception] = SubscriberRegistry(
            "sync_error", get_logger=get_logger
        )
        self._cycle_lock = asyncio.Lock()
        # Last cursor position seen per scope; failure reports read this, not the store.
        self._known_blocks: dict[str, int] = {}
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task[None]] = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def on_error(self, callback: Callable[[Exception], Any]) -> Unsubscribe:
        """Register callback for sync failures that survived all retries."""
        return self._error_observers.subscribe(callback)

    async def start(self) -> None:
        """Run one full sync now, then schedule one every poll_interval_seconds.

        A failing first sync is reported to observers and does not prevent
        the schedule from starting.
        """
        if self._running:
            self._logger.warning("sync_engine_already_running")
            return
        self._running = True
        self._stop_event = asyncio.Event()
        self._logger.info(
            "sync_engine_started",
            sync_poll_interval_seconds=self._settings.sync.poll_interval_seconds,
        )
        await self._run_scheduled()
        if self._running:
            self._task = asyncio.create_task(self._loop(), name="sync-engine")

    async def stop(self) -> None:
        """Stop the schedule. Waits for a cycle in flight up to stop_timeout_seconds, then cancels it."""
        if not self._running:
            return
        self._running = False
        self._stop_event.set()
        task, self._task = self._task, None
        if task is not None:
            done, _ = await asyncio.wait({task}, timeout=self._settings.sync.stop_timeout_seconds)
            if not done:
                self._logger.warning(
                    "sync_engine_stop_timed_out",
                    sync_stop_timeout_seconds=self._settings.sync.stop_timeout_seconds,
                )
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._logger.info("sync_engine_stopped")

    async def _loop(self) -> None:
        interval = self._settings.sync.poll_interval_seconds
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                await self._run_scheduled()

    async def _run_scheduled(self) -> None:
        try:
            await self.trigger_sync("all")
        except Exception as e:
            # Already logged and reported to observers; the schedule keeps going.
            self._logger.debug("sync_scheduled_cycle_skipped", error_type=type(e).__name__)

    async def sync_all(self) -> SyncReport:
        return await self.trigger_sync("all")

    async def sync_projects(self) -> SyncReport:
        return await self.trigger_sync("projects")

    async def sync_contributions(self) -> SyncReport:
        return await self.trigger_sync("contributions")

    async def sync_withdrawals(self) -> SyncReport:
        return await self.trigger_sync("withdrawals")

    async def sync_refunds(self) -> SyncReport:
        return await self.trigger_sync("refunds")

    async def trigger_sync(self, scope: SyncScope = "all") -> SyncReport:
        """Run one sync for scope with retries and return what was replayed.

        Raises:
            ValueError: If scope is unknown.
            Exception: The last failure once retries are exhausted (after it was
                logged and reported to error observers), or the first
                non-transient failure.
        """
        if scope not in _SCOPES:
            raise ValueError(f"Unknown sync scope: {scope!r}")
        operation, event_types = _SCOPES[scope]
        async with self._cycle_lock:
            cfg = self._settings.sync
            try:
                return await retry_with_backoff(
                    lambda: self._cycle(scope, event_types),
                    cfg.max_attempts,
                    cfg.backoff_initial_seconds,
                    cfg.backoff_max_seconds,
                    retry_on=_RETRYABLE,
                    operation_name=operation,
                    sleep=self._sleep,
                    logger=self._logger,
                )
            except Exception as e:
                await self._report_failure(operation, scope, e)
                raise

    async def _load_cursor(self, name: str) -> SyncCursor:
        cursor = await self._cursors.get(name)
        if cursor is None:
            cursor = SyncCursor.initial(name, self._settings.sync.start_block)
        self._known_blocks[name] = cursor.last_synced_block
        return cursor

    async def _cycle(
        self,
        scope: str,
        event_types: Optional[frozenset[LedgerEventType]],
    ) -> SyncReport:
        cursor = await self._load_cursor(scope)
        since = cursor.last_synced_block
        fetched = await self._ledger.fetch_events(since, event_types)
        events = sorted(
            (
                e
                for e in fetched
                if e.block_height > since and (event_types is None or e.type in event_types)
            ),
            key=lambda e: e.sort_key,
        )
        report = SyncReport(scope=scope, from_block=since)
        for event in events:
            await self._replay(event, report)

        if events:
            report.to_block = events[-1].block_height
            await self._cursors.save(cursor.advanced_to(report.to_block))
            self._known_blocks[scope] = report.to_block
        self._logger.info(
            "sync_cycle_completed",
            sync_scope=scope,
            sync_from_block=since,
            sync_to_block=report.to_block,
            sync_events=len(events),
            sync_skipped=report.skipped,
        )
        return report

    async def _replay(self, event: LedgerEvent, report: SyncReport) -> None:
        if event.type is LedgerEventType.PROJECT_CREATED:
            if await self._project_state.create_from_event(event):
                report.projects_synced += 1
            else:
                report.already_synced += 1
            return

        ledger_project_id = str(event.data.get("projectId", event.data.get("project_id", ""))).strip()
        project = await self._projects.get_by_ledger_id(ledger_project_id) if ledger_project_id else None
        if project is None:
            self._logger.warning(
                "sync_event_project_unknown",
                ledger_event_type=event.type.value,
                ledger_project_id=ledger_project_id,
                tx_id=event.tx_id,
                block_height=event.block_height,
            )
            report.skipped += 1
            return

        if event.type is LedgerEventType.CONTRIBUTION_MADE:
            await self._replay_contribution(event, project.id, report)
        elif event.type is LedgerEventType.FUNDS_WITHDRAWN:
            await self._project_state.mark_withdrawn(ledger_project_id)
            report.withdrawals_synced += 1
        elif event.type is LedgerEventType.REFUND_PROCESSED:
            await self._project_state.expire_if_active(ledger_project_id)
            report.refunds_synced += 1

    async def _replay_contribution(self, event: LedgerEvent, project_id: UUID, report: SyncReport) -> None:
        contributor = str(event.data.get("contributor", "")).strip()
        try:
            amount = to_base_units(event.data.get("amount"), self._settings.ledger.token_decimals)
        except ValueError as e:
            raise ValidationFailedError(f"ContributionMade {event.tx_id} has a bad amount: {e}") from e
        try:
            await self._recorder.record(
                project_id,
                contributor,
                amount,
                event.tx_id,
                block_height=event.block_height,
                timestamp=event.block_timestamp,
            )
        except DuplicateTransactionError:
            self._logger.debug("contribution_already_synced", tx_id=event.tx_id)
            report.already_synced += 1
            return
        except ProjectNotFoundError:
            # Project row vanished between lookup and insert.
            report.skipped += 1
            return
        report.contributions_synced += 1

    async def _report_failure(self, operation: str, scope: str, error: Exception) -> None:
        failed_at = datetime.now(timezone.utc)
        last_synced_block = self._known_blocks.get(scope, self._settings.sync.start_block)
        self._logger.error(
            "sync_failed",
            sync_operation=operation,
            timestamp=failed_at.isoformat(),
            last_synced_block=last_synced_block,
            error_type=type(error).__name__,
            error_message=str(error),
            exc_info=error,
        )
        await self._error_observers.publish(error)
        if self._event_bus is not None:
            self._event_bus.dispatch(
                SyncCycleFailedEvent(
                    operation=operation,
                    error_type=type(error).__name__,
                    error_message=str(error),
                    last_synced_block=last_synced_block,
                    failed_at=failed_at,
                )
            )
