# -*- coding: utf-8 -*-
"""SyncGateway: the operations the HTTP layer calls into."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Optional
from uuid import UUID

import structlog

from crowdfund_sync.models.contribution_record import ContributionRecord
from crowdfund_sync.models.contribution_stats import ContributionStats
from crowdfund_sync.models.project import Project
from crowdfund_sync.models.transaction_record import TransactionRecord
from crowdfund_sync.services.contribution import (
    ContributionConfirmationService,
    ContributionRecorder,
)
from crowdfund_sync.services.project_state import ProjectStateUpdater
from crowdfund_sync.services.sync import SyncEngine, SyncReport, SyncScope
from crowdfund_sync.services.transaction_tracker import TransactionTracker
from crowdfund_sync.utils.subscribers import Unsubscribe


class SyncGateway:
    """Facade over tracker, recorder and sync engine.

    Errors propagate as the domain exceptions; use
    crowdfund_sync.exceptions.to_error_response to turn them into a response.
    """

    def __init__(
        self,
        tracker: TransactionTracker,
        recorder: ContributionRecorder,
        confirmation: ContributionConfirmationService,
        sync_engine: SyncEngine,
        project_state: ProjectStateUpdater,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._tracker = tracker
        self._recorder = recorder
        self._confirmation = confirmation
        self._sync_engine = sync_engine
        self._project_state = project_state
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def track_transaction(self, tx_id: str, *, wait: bool = True) -> TransactionRecord:
        """Return the record for tx_id; with wait, only once it is confirmed or failed."""
        return await self._tracker.track_transaction(tx_id, wait=wait)

    async def record_contribution(
        self,
        project_id: UUID,
        contributor_address: str,
        amount: int,
        tx_id: str,
        *,
        confirm: bool = True,
        block_height: int = 0,
        timeout: Optional[float] = None,
    ) -> ContributionRecord:
        """Record a contribution.

        With confirm (default) the transfer is first tracked to finality and a
        failed transfer raises TransactionFailedError. Without it the caller
        asserts the transfer is already confirmed.
        """
        if confirm:
            return await self._confirmation.confirm_and_record(
                project_id, contributor_address, amount, tx_id, timeout=timeout
            )
        return await self._recorder.record(
            project_id, contributor_address, amount, tx_id, block_height=block_height
        )

    async def trigger_sync(self, scope: SyncScope = "all") -> SyncReport:
        self._logger.info("manual_sync_triggered", sync_scope=scope)
        return await self._sync_engine.trigger_sync(scope)

    def subscribe(
        self,
        *,
        on_status_change: Optional[Callable[[TransactionRecord], Any]] = None,
        on_sync_error: Optional[Callable[[Exception], Any]] = None,
    ) -> Unsubscribe:
        """Register observers. The returned function removes all of them."""
        removers: list[Unsubscribe] = []
        if on_status_change is not None:
            removers.append(self._tracker.on_status_change(on_status_change))
        if on_sync_error is not None:
            removers.append(self._sync_engine.on_error(on_sync_error))

        def _unsubscribe() -> None:
            for remove in removers:
                remove()

        return _unsubscribe

    async def contribution_stats(self, project_id: UUID) -> ContributionStats:
        return await self._recorder.get_stats(project_id)

    async def expire_overdue_projects(self, now: Optional[datetime] = None) -> list[Project]:
        return await self._project_state.expire_overdue(now)
