# -*- coding: utf-8 -*-
"""Abstract interface for contribution storage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Optional
from uuid import UUID

from crowdfund_sync.models.contribution_record import ContributionRecord
from crowdfund_sync.models.project import Project

AggregateRecompute = Callable[[Project, Sequence[ContributionRecord]], Project]
"""Pure function returning the project with its aggregate rebuilt from all its contributions."""


class IContributionRepository(ABC):
    """Interface for persisting ContributionRecord (unique tx_id) and its project aggregate."""

    @abstractmethod
    async def get_by_tx_id(self, tx_id: str) -> Optional[ContributionRecord]:
        ...

    @abstractmethod
    async def insert_with_aggregate(
        self,
        contribution: ContributionRecord,
        recompute: AggregateRecompute,
    ) -> Project:
        """Insert contribution and store recompute(project, all contributions) in one unit.

        Either both writes happen or neither does.

        Returns:
            The updated project.

        Raises:
            DuplicateKeyError: If a contribution with the same tx_id exists.
            RecordNotFoundError: If the contribution's project does not exist.
        """
        ...

    @abstractmethod
    async def list_by_project(
        self, project_id: UUID, limit: Optional[int] = None
    ) -> list[ContributionRecord]:
        """Return contributions to project_id, newest first."""
        ...

    @abstractmethod
    async def list_by_contributor(self, contributor_address: str) -> list[ContributionRecord]:
        """Return contributions made by contributor_address, newest first."""
        ...
