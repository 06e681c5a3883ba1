"""In-memory contribution repository (unique tx_id) with atomic aggregate update.

insert_with_aggregate does its check and both writes without awaiting, so on
a single event loop no other coroutine can observe or interleave with a
half-done insert. The tx_id check is the uniqueness constraint.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from crowdfund_sync.exceptions.store_exceptions import DuplicateKeyError, RecordNotFoundError
from crowdfund_sync.models.contribution_record import ContributionRecord
from crowdfund_sync.models.project import Project
from crowdfund_sync.persistence.repositories.in_memory.project_repository import (
    InMemoryProjectRepository,
)
from crowdfund_sync.persistence.repositories.interfaces.contribution_repository import (
    AggregateRecompute,
    IContributionRepository,
)


def _newest_first(records: list[ContributionRecord]) -> list[ContributionRecord]:
    return sorted(records, key=lambda c: (c.created_at, c.block_height), reverse=True)


class InMemoryContributionRepository(IContributionRepository):
    """In-memory implementation of IContributionRepository."""

    def __init__(self, project_repository: InMemoryProjectRepository) -> None:
        """Initialize an empty store bound to the project table it aggregates into."""
        self._projects = project_repository
        self._by_tx_id: dict[str, ContributionRecord] = {}
        self._by_project: dict[UUID, list[ContributionRecord]] = {}

    async def get_by_tx_id(self, tx_id: str) -> ContributionRecord | None:
        return self._by_tx_id.get(tx_id.strip())

    async def insert_with_aggregate(
        self,
        contribution: ContributionRecord,
        recompute: AggregateRecompute,
    ) -> Project:
        if contribution.tx_id in self._by_tx_id:
            raise DuplicateKeyError("contributions", "tx_id", contribution.tx_id)
        project = self._projects.get_unchecked(contribution.project_id)
        if project is None:
            raise RecordNotFoundError("projects", contribution.project_id)

        rows = [*self._by_project.get(contribution.project_id, []), contribution]
        # Compute before writing so a failing recompute leaves nothing behind.
        updated = recompute(project, rows)

        self._by_tx_id[contribution.tx_id] = contribution
        self._by_project[contribution.project_id] = rows
        self._projects.replace_unchecked(updated)
        return updated

    async def list_by_project(
        self, project_id: UUID, limit: Optional[int] = None
    ) -> list[ContributionRecord]:
        rows = _newest_first(list(self._by_project.get(project_id, [])))
        return rows[:limit] if limit is not None else rows

    async def list_by_contributor(self, contributor_address: str) -> list[ContributionRecord]:
        address = contributor_address.strip()
        return _newest_first([c for c in self._by_tx_id.values() if c.contributor_address == address])
