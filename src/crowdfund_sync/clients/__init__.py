"""HTTP and ledger clients."""

from crowdfund_sync.clients.http import AsyncHttpClient
from crowdfund_sync.clients.ledger import ILedgerClient, LedgerClient, LedgerTxStatus

__all__ = [
    "AsyncHttpClient",
    "ILedgerClient",
    "LedgerClient",
    "LedgerTxStatus",
]
