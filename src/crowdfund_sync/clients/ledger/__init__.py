"""Ledger client."""

from crowdfund_sync.clients.ledger.base import ILedgerClient, LedgerTxStatus
from crowdfund_sync.clients.ledger.ledger_client import LedgerClient, map_tx_status

__all__ = ["ILedgerClient", "LedgerClient", "LedgerTxStatus", "map_tx_status"]
