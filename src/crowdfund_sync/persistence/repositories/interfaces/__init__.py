# -*- coding: utf-8 -*-
"""Repository interfaces (abstractions). Implementations live in in_memory/, sql/, etc."""

from crowdfund_sync.persistence.repositories.interfaces.contribution_repository import (
    AggregateRecompute,
    IContributionRepository,
)
from crowdfund_sync.persistence.repositories.interfaces.project_repository import (
    IProjectRepository,
)
from crowdfund_sync.persistence.repositories.interfaces.sync_cursor_repository import (
    ISyncCursorRepository,
)
from crowdfund_sync.persistence.repositories.interfaces.transaction_repository import (
    ITransactionRepository,
)
from crowdfund_sync.persistence.repositories.interfaces.user_repository import (
    IUserRepository,
)

__all__ = [
    "AggregateRecompute",
    "IContributionRepository",
    "IProjectRepository",
    "ISyncCursorRepository",
    "ITransactionRepository",
    "IUserRepository",
]
