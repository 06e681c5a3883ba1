# -*- coding: utf-8 -*-
"""ContributionRecorder: idempotent write of a confirmed contribution and its project aggregate."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Optional
from uuid import UUID

import structlog

from crowdfund_sync.events.contributions import ContributionRecordedEvent
from crowdfund_sync.exceptions import (
    DuplicateTransactionError,
    ProjectNotFoundError,
    StoreUnavailableError,
    ValidationFailedError,
)
from crowdfund_sync.exceptions.store_exceptions import DuplicateKeyError, RecordNotFoundError
from crowdfund_sync.models.contribution_record import ContributionRecord
from crowdfund_sync.models.contribution_stats import ContributionStats
from crowdfund_sync.models.project import ProjectStatus
from crowdfund_sync.persistence.repositories.interfaces.contribution_repository import (
    IContributionRepository,
)
from crowdfund_sync.persistence.repositories.interfaces.project_repository import (
    IProjectRepository,
)
from crowdfund_sync.persistence.repositories.interfaces.user_repository import IUserRepository
from crowdfund_sync.services.contribution.aggregates import compute_stats, recompute_aggregate
from crowdfund_sync.utils.validation import is_tx_id, is_wallet_address, mask_address

if TYPE_CHECKING:
    from bubus import EventBus  # type: ignore[import-untyped]


class ContributionRecorder:
    """Writes ContributionRecord rows exactly once per ledger transaction.

    The contribution insert and the aggregate recompute happen in one store
    unit (insert_with_aggregate). The unique tx_id is what makes concurrent
    request-time and sync-time recording safe: the second writer gets
    DuplicateTransactionError.
    """

    def __init__(
        self,
        contribution_repository: IContributionRepository,
        project_repository: IProjectRepository,
        user_repository: IUserRepository,
        *,
        event_bus: Optional[Any] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._contributions = contribution_repository
        self._projects = project_repository
        self._users = user_repository
        self._event_bus: Optional["EventBus"] = event_bus
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def record(
        self,
        project_id: UUID,
        contributor_address: str,
        amount: int,
        tx_id: str,
        block_height: int = 0,
        timestamp: Optional[datetime] = None,
    ) -> ContributionRecord:
        """Record a confirmed contribution and update the project aggregate.

        Args:
            project_id: Local project id.
            contributor_address: Wallet that sent the funds.
            amount: Amount in the smallest currency unit (> 0).
            tx_id: Ledger transaction id; unique across contributions.
            block_height: Block of the transfer, 0 when unknown.
            timestamp: When the contribution happened (defaults to now).

        Returns:
            The stored record.

        Raises:
            ValidationFailedError: Bad amount, address, tx id or block height.
            ProjectNotFoundError: project_id is unknown.
            DuplicateTransactionError: tx_id is already recorded.
            StoreUnavailableError: The store could not be reached.
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValidationFailedError(f"Amount must be a positive integer, got {amount!r}")
        if not is_wallet_address(contributor_address):
            raise ValidationFailedError(f"Invalid wallet address: {contributor_address!r}")
        if not is_tx_id(tx_id):
            raise ValidationFailedError(f"Invalid transaction id: {tx_id!r}")
        if block_height < 0:
            raise ValidationFailedError("block_height must be >= 0")

        try:
            if await self._projects.get(project_id) is None:
                raise ProjectNotFoundError(project_id)
            await self._users.ensure(contributor_address)
            contribution = ContributionRecord.create(
                project_id,
                contributor_address,
                amount,
                tx_id,
                block_height,
                created_at=timestamp,
            )
            project = await self._contributions.insert_with_aggregate(contribution, recompute_aggregate)
        except DuplicateKeyError as e:
            self._logger.info("contribution_duplicate", tx_id=tx_id, project_id=str(project_id))
            raise DuplicateTransactionError(tx_id) from e
        except RecordNotFoundError as e:
            raise ProjectNotFoundError(project_id) from e
        except (ConnectionError, TimeoutError) as e:
            raise StoreUnavailableError(f"Store unavailable while recording {tx_id}") from e

        self._logger.info(
            "contribution_recorded",
            tx_id=tx_id,
            project_id=str(project_id),
            contributor_address=mask_address(contributor_address),
            amount=amount,
            block_height=block_height,
            project_total_raised=project.total_raised,
            project_contributor_count=project.contributor_count,
        )
        if project.status is ProjectStatus.FUNDED and project.total_raised - amount < project.funding_goal:
            self._logger.info(
                "project_funded",
                project_id=str(project_id),
                project_total_raised=project.total_raised,
                project_funding_goal=project.funding_goal,
            )

        if self._event_bus is not None:
            self._event_bus.dispatch(
                ContributionRecordedEvent(
                    contribution_id=contribution.id,
                    project_id=project_id,
                    contributor_address=contribution.contributor_address,
                    amount=amount,
                    tx_id=contribution.tx_id,
                    block_height=block_height,
                    total_raised=project.total_raised,
                    contributor_count=project.contributor_count,
                    project_status=project.status.value,
                )
            )
        return contribution

    async def list_by_project(
        self, project_id: UUID, limit: Optional[int] = None
    ) -> list[ContributionRecord]:
        """Contributions to project_id, newest first."""
        return await self._contributions.list_by_project(project_id, limit)

    async def list_by_contributor(self, contributor_address: str) -> list[ContributionRecord]:
        """Contributions made by contributor_address, newest first."""
        return await self._contributions.list_by_contributor(contributor_address)

    async def get_stats(self, project_id: UUID) -> ContributionStats:
        """Total, distinct contributors, floored average and largest contribution.

        Raises:
            ProjectNotFoundError: project_id is unknown.
        """
        if await self._projects.get(project_id) is None:
            raise ProjectNotFoundError(project_id)
        rows = await self._contributions.list_by_project(project_id)
        return compute_stats(project_id, rows)
