"""ContributionStats: summary figures over one project's contributions."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ContributionStats:
    """Totals are in the smallest currency unit; the average is floored."""

    project_id: UUID
    total_raised: int
    contributor_count: int
    contribution_count: int
    average_contribution: int
    largest_contribution: int

    @classmethod
    def empty(cls, project_id: UUID) -> ContributionStats:
        return cls(
            project_id=project_id,
            total_raised=0,
            contributor_count=0,
            contribution_count=0,
            average_contribution=0,
            largest_contribution=0,
        )
