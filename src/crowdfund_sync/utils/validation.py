"""Validation helpers for wallet addresses and ledger transaction ids."""

from __future__ import annotations

import re
from typing import Any

# Stacks c32 principal (standard or contract), Flow 8-byte and EVM 20-byte hex addresses.
_STACKS_ADDRESS = re.compile(r"^S[PMTN][0-9A-HJKMNP-TV-Z]{38,39}(\.[a-zA-Z][a-zA-Z0-9_-]{0,39})?$")
_HEX_ADDRESS = re.compile(r"^0x(?:[0-9a-fA-F]{16}|[0-9a-fA-F]{40})$")
_TX_ID = re.compile(r"^(0x)?[0-9a-zA-Z_-]{1,128}$")


def is_wallet_address(addr: Any) -> bool:
    """Return True if addr looks like a ledger wallet address."""
    if not isinstance(addr, str):
        return False
    s = addr.strip()
    return bool(_STACKS_ADDRESS.match(s) or _HEX_ADDRESS.match(s))


def is_tx_id(tx_id: Any) -> bool:
    """Return True if tx_id is a non-empty ledger transaction identifier."""
    if not isinstance(tx_id, str):
        return False
    return bool(_TX_ID.match(tx_id.strip()))


def mask_address(addr: str | None) -> str:
    """Return a masked wallet address for logging (e.g. 0x1234...abcd)."""
    if not addr or len(addr) < 10:
        return "***"
    return f"{addr[:6]}...{addr[-4:]}"
