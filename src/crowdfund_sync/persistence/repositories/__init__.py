# -*- coding: utf-8 -*-
"""Repositories: interfaces (abstractions) and implementations (in_memory, etc.)."""

from crowdfund_sync.persistence.repositories.interfaces import (
    AggregateRecompute,
    IContributionRepository,
    IProjectRepository,
    ISyncCursorRepository,
    ITransactionRepository,
    IUserRepository,
)
from crowdfund_sync.persistence.repositories.in_memory import (
    InMemoryContributionRepository,
    InMemoryProjectRepository,
    InMemorySyncCursorRepository,
    InMemoryTransactionRepository,
    InMemoryUserRepository,
)

__all__ = [
    "AggregateRecompute",
    "IContributionRepository",
    "IProjectRepository",
    "ISyncCursorRepository",
    "ITransactionRepository",
    "IUserRepository",
    "InMemoryContributionRepository",
    "InMemoryProjectRepository",
    "InMemorySyncCursorRepository",
    "InMemoryTransactionRepository",
    "InMemoryUserRepository",
]
