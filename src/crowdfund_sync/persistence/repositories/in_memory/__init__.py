"""In-memory repository implementations."""

from crowdfund_sync.persistence.repositories.in_memory.contribution_repository import (
    InMemoryContributionRepository,
)
from crowdfund_sync.persistence.repositories.in_memory.project_repository import (
    InMemoryProjectRepository,
)
from crowdfund_sync.persistence.repositories.in_memory.sync_cursor_repository import (
    InMemorySyncCursorRepository,
)
from crowdfund_sync.persistence.repositories.in_memory.transaction_repository import (
    InMemoryTransactionRepository,
)
from crowdfund_sync.persistence.repositories.in_memory.user_repository import (
    InMemoryUserRepository,
)

__all__ = [
    "InMemoryContributionRepository",
    "InMemoryProjectRepository",
    "InMemorySyncCursorRepository",
    "InMemoryTransactionRepository",
    "InMemoryUserRepository",
]
