# -*- coding: utf-8 -*-
"""Utility modules."""

from crowdfund_sync.utils.backoff import retry_with_backoff
from crowdfund_sync.utils.subscribers import SubscriberRegistry, Unsubscribe
from crowdfund_sync.utils.units import to_base_units
from crowdfund_sync.utils.validation import (
    is_tx_id,
    is_wallet_address,
    mask_address,
)

__all__ = [
    "SubscriberRegistry",
    "Unsubscribe",
    "is_tx_id",
    "is_wallet_address",
    "mask_address",
    "retry_with_backoff",
    "to_base_units",
]
