"""Project: local read model of a crowdfunding project and its funding aggregate.

total_raised and contributor_count are derived from the project's contribution
records and are only written together with a contribution insert, by
withdrawal/refund replay, or by the deadline-expiry sweep.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from crowdfund_sync.exceptions import InvalidStatusTransitionError


class ProjectStatus(str, Enum):
    """Project lifecycle state."""

    DRAFT = "draft"
    ACTIVE = "active"
    FUNDED = "funded"
    EXPIRED = "expired"
    WITHDRAWN = "withdrawn"
    CANCELLED = "cancelled"


# Allowed status moves. FUNDED never goes back to ACTIVE; a late-replayed
# contribution can still fund an EXPIRED project.
_TRANSITIONS: dict[ProjectStatus, frozenset[ProjectStatus]] = {
    ProjectStatus.DRAFT: frozenset({ProjectStatus.ACTIVE, ProjectStatus.CANCELLED}),
    ProjectStatus.ACTIVE: frozenset(
        {
            ProjectStatus.FUNDED,
            ProjectStatus.EXPIRED,
            ProjectStatus.WITHDRAWN,
            ProjectStatus.CANCELLED,
        }
    ),
    ProjectStatus.FUNDED: frozenset({ProjectStatus.WITHDRAWN}),
    ProjectStatus.EXPIRED: frozenset({ProjectStatus.FUNDED, ProjectStatus.WITHDRAWN}),
    ProjectStatus.WITHDRAWN: frozenset(),
    ProjectStatus.CANCELLED: frozenset(),
}

_FUNDABLE = frozenset({ProjectStatus.ACTIVE, ProjectStatus.EXPIRED})


@dataclass(frozen=True, slots=True)
class Project:
    """A crowdfunding project as mirrored from the ledger.

    Identity: id (local UUID). ledger_project_id is the on-chain identifier
    carried by ledger events.
    """

    id: UUID
    ledger_project_id: str
    title: str
    creator_address: str
    funding_goal: int
    """Goal in the smallest currency unit."""
    status: ProjectStatus
    created_at: datetime
    updated_at: datetime
    total_raised: int = 0
    contributor_count: int = 0
    deadline: Optional[datetime] = None
    """Funding deadline; None when unknown."""

    @property
    def goal_met(self) -> bool:
        return self.total_raised >= self.funding_goal

    def can_transition_to(self, status: ProjectStatus) -> bool:
        return status in _TRANSITIONS[self.status]

    def with_status(
        self,
        status: ProjectStatus,
        *,
        updated_at: Optional[datetime] = None,
    ) -> Project:
        """Return a copy with status changed.

        Raises:
            InvalidStatusTransitionError: If the move is not allowed from the current status.
        """
        if not self.can_transition_to(status):
            raise InvalidStatusTransitionError("project", self.status.value, status.value)
        return replace(self, status=status, updated_at=updated_at or datetime.now(timezone.utc))

    def with_aggregate(
        self,
        total_raised: int,
        contributor_count: int,
        *,
        updated_at: Optional[datetime] = None,
    ) -> Project:
        """Return a copy with the recomputed aggregate.

        An ACTIVE or EXPIRED project whose new total meets the goal is promoted
        to FUNDED. Other statuses are left as is.
        """
        status = self.status
        if status in _FUNDABLE and total_raised >= self.funding_goal:
            status = ProjectStatus.FUNDED
        return replace(
            self,
            total_raised=total_raised,
            contributor_count=contributor_count,
            status=status,
            updated_at=updated_at or datetime.now(timezone.utc),
        )

    @classmethod
    def create(
        cls,
        ledger_project_id: str,
        title: str,
        creator_address: str,
        funding_goal: int,
        *,
        deadline: Optional[datetime] = None,
        status: ProjectStatus = ProjectStatus.ACTIVE,
        id: UUID | None = None,
        created_at: datetime | None = None,
    ) -> Project:
        """Create a project with an empty aggregate."""
        ledger_project_id = ledger_project_id.strip()
        if not ledger_project_id:
            raise ValueError("ledger_project_id must be non-empty")
        if funding_goal <= 0:
            raise ValueError("funding_goal must be > 0")
        now = created_at or datetime.now(timezone.utc)
        return cls(
            id=id or uuid4(),
            ledger_project_id=ledger_project_id,
            title=title.strip(),
            creator_address=creator_address.strip(),
            funding_goal=funding_goal,
            status=status,
            created_at=now,
            updated_at=now,
            deadline=deadline,
        )
