"""Store-specific exceptions raised by repositories."""

from __future__ import annotations


class StoreError(Exception):
    """Base exception for repository operations."""


class DuplicateKeyError(StoreError):
    """Raised when an insert violates a uniqueness constraint."""

    def __init__(self, table: str, key: str, value: object) -> None:
        super().__init__(f"Duplicate value for {table}.{key}: {value!r}")
        self.table = table
        self.key = key
        self.value = value


class RecordNotFoundError(StoreError):
    """Raised when an atomic update targets a row that does not exist."""

    def __init__(self, table: str, key: object) -> None:
        super().__init__(f"No row in {table} for {key!r}")
        self.table = table
        self.key = key
