"""In-memory project repository (keyed by id, unique ledger_project_id)."""

from __future__ import annotations

from uuid import UUID

from crowdfund_sync.exceptions.store_exceptions import DuplicateKeyError, RecordNotFoundError
from crowdfund_sync.models.project import Project, ProjectStatus
from crowdfund_sync.persistence.repositories.interfaces.project_repository import (
    IProjectRepository,
)


class InMemoryProjectRepository(IProjectRepository):
    """In-memory implementation of IProjectRepository.

    Also used by InMemoryContributionRepository for the atomic
    contribution + aggregate write; see replace_unchecked.
    """

    def __init__(self) -> None:
        """Initialize an empty in-memory store."""
        self._store: dict[UUID, Project] = {}
        self._by_ledger_id: dict[str, UUID] = {}

    async def get(self, project_id: UUID) -> Project | None:
        return self._store.get(project_id)

    async def get_by_ledger_id(self, ledger_project_id: str) -> Project | None:
        project_id = self._by_ledger_id.get(ledger_project_id.strip())
        return self._store.get(project_id) if project_id is not None else None

    async def insert(self, project: Project) -> None:
        if project.id in self._store:
            raise DuplicateKeyError("projects", "id", project.id)
        if project.ledger_project_id in self._by_ledger_id:
            raise DuplicateKeyError("projects", "ledger_project_id", project.ledger_project_id)
        self._store[project.id] = project
        self._by_ledger_id[project.ledger_project_id] = project.id

    async def save(self, project: Project) -> None:
        if project.id not in self._store:
            raise RecordNotFoundError("projects", project.id)
        self.replace_unchecked(project)

    async def list_by_status(self, status: ProjectStatus) -> list[Project]:
        projects = [p for p in self._store.values() if p.status == status]
        return sorted(projects, key=lambda p: p.created_at)

    def get_unchecked(self, project_id: UUID) -> Project | None:
        """Synchronous read for callers already inside an atomic section."""
        return self._store.get(project_id)

    def replace_unchecked(self, project: Project) -> None:
        """Synchronous write for callers already inside an atomic section."""
        self._store[project.id] = project
        self._by_ledger_id[project.ledger_project_id] = project.id
