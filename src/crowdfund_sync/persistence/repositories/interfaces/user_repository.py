# -*- coding: utf-8 -*-
"""Abstract interface for user storage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from crowdfund_sync.models.user import UserRecord


class IUserRepository(ABC):
    """Interface for persisting UserRecord (keyed by wallet address)."""

    @abstractmethod
    async def get(self, wallet_address: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def ensure(self, wallet_address: str) -> UserRecord:
        """Return the user for wallet_address, creating it if missing."""
        ...
