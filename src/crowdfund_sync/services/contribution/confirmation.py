"""Request-time path: wait for a contribution transfer to confirm, then record it."""

from __future__ import annotations

from typing import Any, Callable, Optional
from uuid import UUID

import structlog

from crowdfund_sync.exceptions import TransactionFailedError
from crowdfund_sync.models.contribution_record import ContributionRecord
from crowdfund_sync.models.transaction_record import TransactionKind, TransactionStatus
from crowdfund_sync.services.contribution.contribution_recorder import ContributionRecorder
from crowdfund_sync.services.transaction_tracker import TransactionTracker


class ContributionConfirmationService:
    """Tracks a contribution transfer to finality and records it when confirmed."""

    def __init__(
        self,
        tracker: TransactionTracker,
        recorder: ContributionRecorder,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._tracker = tracker
        self._recorder = recorder
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def confirm_and_record(
        self,
        project_id: UUID,
        contributor_address: str,
        amount: int,
        tx_id: str,
        *,
        timeout: Optional[float] = None,
    ) -> ContributionRecord:
        """Wait for tx_id to finalize and record the contribution if it confirmed.

        A pending transaction record is created first when tx_id is not tracked yet.

        Raises:
            TransactionFailedError: The transfer failed or timed out.
            DuplicateTransactionError: The contribution was already recorded (e.g. by sync).
            ProjectNotFoundError: project_id is unknown.
        """
        if await self._tracker.get_transaction(tx_id) is None:
            await self._tracker.create_transaction(
                tx_id, TransactionKind.CONTRIBUTE, contributor_address, project_id
            )
        status = await self._tracker.wait_until_terminal(tx_id, timeout=timeout)
        record = await self._tracker.get_transaction(tx_id)
        if status is not TransactionStatus.CONFIRMED:
            error_message = record.error_message if record is not None else None
            self._logger.warning("contribution_not_confirmed", tx_id=tx_id, error_message=error_message)
            raise TransactionFailedError(tx_id, error_message)
        block_height = record.block_height if record is not None and record.block_height else 0
        return await self._recorder.record(
            project_id,
            contributor_address,
            amount,
            tx_id,
            block_height=block_height,
        )
