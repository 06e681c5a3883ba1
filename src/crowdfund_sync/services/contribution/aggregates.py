"""Pure aggregate computations over a project's contributions."""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from crowdfund_sync.models.contribution_record import ContributionRecord
from crowdfund_sync.models.contribution_stats import ContributionStats
from crowdfund_sync.models.project import Project


def recompute_aggregate(project: Project, contributions: Sequence[ContributionRecord]) -> Project:
    """Return project with total_raised and contributor_count rebuilt from contributions.

    Only rows for project.id count. Promotion to FUNDED follows Project.with_aggregate.
    """
    rows = [c for c in contributions if c.project_id == project.id]
    total = sum(c.amount for c in rows)
    contributors = {c.contributor_address for c in rows}
    return project.with_aggregate(total, len(contributors))


def compute_stats(project_id: UUID, contributions: Sequence[ContributionRecord]) -> ContributionStats:
    """Summarize contributions to project_id."""
    rows = [c for c in contributions if c.project_id == project_id]
    if not rows:
        return ContributionStats.empty(project_id)
    total = sum(c.amount for c in rows)
    return ContributionStats(
        project_id=project_id,
        total_raised=total,
        contributor_count=len({c.contributor_address for c in rows}),
        contribution_count=len(rows),
        average_contribution=total // len(rows),
        largest_contribution=max(c.amount for c in rows),
    )
