"""Persistence layer (repositories, etc.)."""

from crowdfund_sync.persistence.repositories import (
    AggregateRecompute,
    IContributionRepository,
    InMemoryContributionRepository,
    InMemoryProjectRepository,
    InMemorySyncCursorRepository,
    InMemoryTransactionRepository,
    InMemoryUserRepository,
    IProjectRepository,
    ISyncCursorRepository,
    ITransactionRepository,
    IUserRepository,
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
