"""Domain exceptions for transaction tracking, contribution recording and ledger sync.

Classes group into the failure taxonomy the engine acts on:

- TransientError: network/timeout/store outage. Retried with backoff internally,
  surfaced only once attempts are exhausted.
- ConflictError: the same ledger transaction was already recorded. Never retried.
- NotFoundError: unknown project or transaction. Never retried.
- ValidationFailedError: bad amount, address or state transition. Never retried.
"""

from __future__ import annotations


class CrowdfundSyncError(Exception):
    """Base exception for crowdfund-sync errors."""

    pass


class MissingRequiredConfigError(CrowdfundSyncError):
    """Raised when a required configuration value is missing."""

    pass


class TransientError(CrowdfundSyncError):
    """Failure expected to clear on retry (network, timeout, store outage)."""

    pass


class LedgerAPIError(TransientError):
    """Raised when a ledger API request fails after retries."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.cause = cause


class RateLimitError(LedgerAPIError):
    """Raised when the ledger API returns HTTP 429 (Too Many Requests)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded (429)",
        *,
        url: str | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, url=url, status_code=429)
        self.retry_after = retry_after


class StoreUnavailableError(TransientError):
    """Raised when the backing store cannot be reached."""

    pass


class ConflictError(CrowdfundSyncError):
    """Raised when a write collides with an existing record."""

    pass


class DuplicateTransactionError(ConflictError):
    """Raised when a contribution for the ledger transaction is already recorded."""

    def __init__(self, tx_id: str) -> None:
        super().__init__(f"Contribution already recorded for transaction {tx_id}")
        self.tx_id = tx_id


class NotFoundError(CrowdfundSyncError):
    """Raised when a referenced entity does not exist."""

    pass


class ProjectNotFoundError(NotFoundError):
    """Raised when the referenced project does not exist."""

    def __init__(self, project_id: object) -> None:
        super().__init__(f"Project not found: {project_id}")
        self.project_id = project_id


class TransactionNotFoundError(NotFoundError):
    """Raised when no transaction record exists for the ledger transaction id."""

    def __init__(self, tx_id: str) -> None:
        super().__init__(f"Transaction not found: {tx_id}")
        self.tx_id = tx_id


class ValidationFailedError(CrowdfundSyncError):
    """Raised when input fails validation (amount, address, identifiers)."""

    pass


class InvalidStatusTransitionError(ValidationFailedError):
    """Raised when a status change would violate the entity's state machine."""

    def __init__(self, entity: str, current: str, requested: str) -> None:
        super().__init__(f"{entity} cannot move from {current!r} to {requested!r}")
        self.entity = entity
        self.current = current
        self.requested = requested


class TransactionFailedError(CrowdfundSyncError):
    """Raised when a transfer ends failed on the request-time confirmation path."""

    def __init__(self, tx_id: str, error_message: str | None = None) -> None:
        super().__init__(f"Transaction {tx_id} failed: {error_message or 'Unknown error'}")
        self.tx_id = tx_id
        self.error_message = error_message
