# -*- coding: utf-8 -*-
"""ProjectStateUpdater: project rows created and moved by ledger events and the deadline sweep."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Optional

import structlog

from crowdfund_sync.config import Settings
from crowdfund_sync.exceptions import ValidationFailedError
from crowdfund_sync.exceptions.store_exceptions import DuplicateKeyError
from crowdfund_sync.models.ledger_event import LedgerEvent
from crowdfund_sync.models.project import Project, ProjectStatus
from crowdfund_sync.persistence.repositories.interfaces.project_repository import (
    IProjectRepository,
)
from crowdfund_sync.persistence.repositories.interfaces.user_repository import IUserRepository
from crowdfund_sync.utils.units import to_base_units


def _parse_deadline(raw: Any) -> Optional[datetime]:
    """Deadline as unix seconds or ISO-8601; None when absent."""
    if raw is None or raw == "" or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return datetime.fromtimestamp(raw, tz=timezone.utc)
    text = str(raw).strip()
    if text.replace(".", "", 1).isdigit():
        return datetime.fromtimestamp(float(text), tz=timezone.utc)
    parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


class ProjectStateUpdater:
    """Applies ProjectCreated, FundsWithdrawn and RefundProcessed to the local project rows.

    Status moves go through Project.with_status, so funded never goes back to active.
    """

    def __init__(
        self,
        project_repository: IProjectRepository,
        user_repository: IUserRepository,
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._projects = project_repository
        self._users = user_repository
        self._decimals = settings.ledger.token_decimals
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def create_from_event(self, event: LedgerEvent) -> bool:
        """Create the project announced by a ProjectCreated event.

        Returns:
            True if created, False if a project with that ledger id already exists.

        Raises:
            ValidationFailedError: If the event payload is incomplete or malformed.
        """
        data = event.data
        ledger_project_id = str(data.get("projectId", data.get("project_id", ""))).strip()
        creator = str(data.get("creator", "")).strip()
        if not ledger_project_id or not creator:
            raise ValidationFailedError(f"ProjectCreated {event.tx_id} lacks projectId or creator")

        if await self._projects.get_by_ledger_id(ledger_project_id) is not None:
            self._logger.debug("project_already_synced", ledger_project_id=ledger_project_id)
            return False

        try:
            goal = to_base_units(data.get("goal", data.get("funding_goal")), self._decimals)
            deadline = _parse_deadline(data.get("deadline"))
            project = Project.create(
                ledger_project_id,
                str(data.get("title", "")),
                creator,
                goal,
                deadline=deadline,
                created_at=event.block_timestamp,
            )
        except ValueError as e:
            raise ValidationFailedError(f"ProjectCreated {event.tx_id} is malformed: {e}") from e

        await self._users.ensure(creator)
        try:
            await self._projects.insert(project)
        except DuplicateKeyError:
            self._logger.debug("project_already_synced", ledger_project_id=ledger_project_id)
            return False
        self._logger.info(
            "project_synced",
            ledger_project_id=ledger_project_id,
            project_id=str(project.id),
            project_funding_goal=goal,
            block_height=event.block_height,
        )
        return True

    async def mark_withdrawn(self, ledger_project_id: str) -> Optional[Project]:
        """Set the project to WITHDRAWN. Returns None if the project is unknown.

        Already-withdrawn projects are returned unchanged. A status that cannot
        move to WITHDRAWN is logged and left as is.
        """
        return await self._move(ledger_project_id, ProjectStatus.WITHDRAWN)

    async def expire_if_active(self, ledger_project_id: str) -> Optional[Project]:
        """Set the project to EXPIRED if it is still ACTIVE. Returns None if unknown."""
        project = await self._projects.get_by_ledger_id(ledger_project_id)
        if project is None:
            return None
        if project.status is not ProjectStatus.ACTIVE:
            return project
        return await self._move(ledger_project_id, ProjectStatus.EXPIRED)

    async def expire_overdue(self, now: Optional[datetime] = None) -> list[Project]:
        """Expire ACTIVE projects past their deadline that have not met their goal.

        Returns:
            The projects that were expired.
        """
        now = now or datetime.now(timezone.utc)
        expired: list[Project] = []
        for project in await self._projects.list_by_status(ProjectStatus.ACTIVE):
            if project.deadline is None or project.deadline >= now or project.goal_met:
                continue
            updated = project.with_status(ProjectStatus.EXPIRED, updated_at=now)
            await self._projects.save(updated)
            expired.append(updated)
        self._logger.info("projects_expired", projects_expired_count=len(expired))
        return expired

    async def _move(self, ledger_project_id: str, status: ProjectStatus) -> Optional[Project]:
        project = await self._projects.get_by_ledger_id(ledger_project_id)
        if project is None:
            return None
        if project.status is status:
            return project
        if not project.can_transition_to(status):
            self._logger.warning(
                "project_status_change_ignored",
                ledger_project_id=ledger_project_id,
                project_status=project.status.value,
                project_requested_status=status.value,
            )
            return project
        updated = project.with_status(status)
        await self._projects.save(updated)
        self._logger.info(
            "project_status_changed",
            ledger_project_id=ledger_project_id,
            project_status=status.value,
            project_previous_status=project.status.value,
        )
        return updated
