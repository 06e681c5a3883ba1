# -*- coding: utf-8 -*-
"""Unit tests for Project status machine and aggregate updates."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from crowdfund_sync.exceptions import InvalidStatusTransitionError
from crowdfund_sync.models.project import Project, ProjectStatus


def test_create_starts_with_empty_aggregate(project_factory: Callable[..., Project]) -> None:
    project = project_factory(funding_goal=500)

    assert project.status == ProjectStatus.ACTIVE
    assert project.total_raised == 0
    assert project.contributor_count == 0
    assert project.goal_met is False


@pytest.mark.parametrize(
    ("ledger_id", "goal", "message"),
    [
        ("  ", 100, "ledger_project_id must be non-empty"),
        ("p-1", 0, "funding_goal must be > 0"),
        ("p-1", -5, "funding_goal must be > 0"),
    ],
)
def test_create_rejects_invalid_input(ledger_id: str, goal: int, message: str, creator_wallet: str) -> None:
    with pytest.raises(ValueError, match=message):
        Project.create(ledger_id, "Title", creator_wallet, goal)


def test_with_aggregate_promotes_active_to_funded_when_goal_met(
    project_factory: Callable[..., Project],
) -> None:
    project = project_factory(funding_goal=1_000)

    below = project.with_aggregate(999, 3)
    reached = project.with_aggregate(1_000, 4)

    assert below.status == ProjectStatus.ACTIVE
    assert reached.status == ProjectStatus.FUNDED
    assert reached.total_raised == 1_000
    assert reached.contributor_count == 4


def test_with_aggregate_never_moves_funded_back_to_active(
    project_factory: Callable[..., Project],
) -> None:
    funded = project_factory(funding_goal=1_000).with_aggregate(1_200, 2)

    lowered = funded.with_aggregate(300, 1)

    assert lowered.status == ProjectStatus.FUNDED
    assert lowered.total_raised == 300


def test_with_aggregate_leaves_draft_status_alone(
    project_factory: Callable[..., Project],
) -> None:
    draft = project_factory(status=ProjectStatus.DRAFT, funding_goal=10)

    assert draft.with_aggregate(50, 1).status == ProjectStatus.DRAFT


@pytest.mark.parametrize("status", [ProjectStatus.WITHDRAWN, ProjectStatus.CANCELLED])
def test_with_aggregate_keeps_closed_projects_closed(
    status: ProjectStatus,
    project_factory: Callable[..., Project],
) -> None:
    assert project_factory(status=status, funding_goal=10).with_aggregate(50, 1).status == status


def test_with_aggregate_funds_expired_project_reaching_goal(
    project_factory: Callable[..., Project],
) -> None:
    expired = project_factory(status=ProjectStatus.EXPIRED, funding_goal=100)

    assert expired.with_aggregate(99, 1).status == ProjectStatus.EXPIRED
    assert expired.with_aggregate(100, 2).status == ProjectStatus.FUNDED


@pytest.mark.parametrize(
    ("start", "target"),
    [
        (ProjectStatus.DRAFT, ProjectStatus.ACTIVE),
        (ProjectStatus.ACTIVE, ProjectStatus.EXPIRED),
        (ProjectStatus.ACTIVE, ProjectStatus.WITHDRAWN),
        (ProjectStatus.FUNDED, ProjectStatus.WITHDRAWN),
        (ProjectStatus.EXPIRED, ProjectStatus.WITHDRAWN),
        (ProjectStatus.EXPIRED, ProjectStatus.FUNDED),
    ],
)
def test_allowed_transitions(
    start: ProjectStatus,
    target: ProjectStatus,
    project_factory: Callable[..., Project],
) -> None:
    assert project_factory(status=start).with_status(target).status == target


@pytest.mark.parametrize(
    ("start", "target"),
    [
        (ProjectStatus.FUNDED, ProjectStatus.ACTIVE),
        (ProjectStatus.WITHDRAWN, ProjectStatus.ACTIVE),
        (ProjectStatus.CANCELLED, ProjectStatus.ACTIVE),
        (ProjectStatus.EXPIRED, ProjectStatus.ACTIVE),
    ],
)
def test_disallowed_transitions_raise(
    start: ProjectStatus,
    target: ProjectStatus,
    project_factory: Callable[..., Project],
) -> None:
    project = project_factory(status=start)

    assert project.can_transition_to(target) is False
    with pytest.raises(InvalidStatusTransitionError):
        project.with_status(target)
