"""Transaction confirmation tracking."""

from crowdfund_sync.services.transaction_tracker.transaction_tracker import (
    MAX_POLLING_ATTEMPTS_MESSAGE,
    TransactionTracker,
)

__all__ = ["MAX_POLLING_ATTEMPTS_MESSAGE", "TransactionTracker"]
