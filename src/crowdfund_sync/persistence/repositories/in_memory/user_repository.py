"""In-memory user repository (keyed by wallet address)."""

from __future__ import annotations

from crowdfund_sync.models.user import UserRecord
from crowdfund_sync.persistence.repositories.interfaces.user_repository import IUserRepository


class InMemoryUserRepository(IUserRepository):
    """In-memory implementation of IUserRepository."""

    def __init__(self) -> None:
        self._store: dict[str, UserRecord] = {}

    async def get(self, wallet_address: str) -> UserRecord | None:
        return self._store.get(wallet_address.strip())

    async def ensure(self, wallet_address: str) -> UserRecord:
        user = self._store.get(wallet_address.strip())
        if user is None:
            user = UserRecord.create(wallet_address)
            self._store[user.wallet_address] = user
        return user
