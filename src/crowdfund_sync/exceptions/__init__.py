"""Exceptions subpackage."""

from crowdfund_sync.exceptions.exceptions import (
    ConflictError,
    CrowdfundSyncError,
    DuplicateTransactionError,
    InvalidStatusTransitionError,
    LedgerAPIError,
    MissingRequiredConfigError,
    NotFoundError,
    ProjectNotFoundError,
    RateLimitError,
    StoreUnavailableError,
    TransactionFailedError,
    TransactionNotFoundError,
    TransientError,
    ValidationFailedError,
)
from crowdfund_sync.exceptions.responses import ErrorResponse, to_error_response
from crowdfund_sync.exceptions.store_exceptions import (
    DuplicateKeyError,
    RecordNotFoundError,
    StoreError,
)

__all__ = [
    "ConflictError",
    "CrowdfundSyncError",
    "DuplicateKeyError",
    "DuplicateTransactionError",
    "ErrorResponse",
    "InvalidStatusTransitionError",
    "LedgerAPIError",
    "MissingRequiredConfigError",
    "NotFoundError",
    "ProjectNotFoundError",
    "RateLimitError",
    "RecordNotFoundError",
    "StoreError",
    "StoreUnavailableError",
    "TransactionFailedError",
    "TransactionNotFoundError",
    "TransientError",
    "ValidationFailedError",
    "to_error_response",
]
