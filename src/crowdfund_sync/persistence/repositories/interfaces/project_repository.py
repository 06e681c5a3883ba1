# -*- coding: utf-8 -*-
"""Abstract interface for project storage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from crowdfund_sync.models.project import Project, ProjectStatus


class IProjectRepository(ABC):
    """Interface for persisting Project rows (keyed by id, unique ledger_project_id)."""

    @abstractmethod
    async def get(self, project_id: UUID) -> Optional[Project]:
        ...

    @abstractmethod
    async def get_by_ledger_id(self, ledger_project_id: str) -> Optional[Project]:
        """Return the project mirrored from ledger_project_id, or None."""
        ...

    @abstractmethod
    async def insert(self, project: Project) -> None:
        """Insert a new project.

        Raises:
            DuplicateKeyError: If the id or ledger_project_id is already stored.
        """
        ...

    @abstractmethod
    async def save(self, project: Project) -> None:
        """Replace an existing project (by id).

        Raises:
            RecordNotFoundError: If the project does not exist.
        """
        ...

    @abstractmethod
    async def list_by_status(self, status: ProjectStatus) -> list[Project]:
        """Return projects in status, oldest first."""
        ...
