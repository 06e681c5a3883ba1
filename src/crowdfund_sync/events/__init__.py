# -*- coding: utf-8 -*-
"""Event bus and event types."""

from crowdfund_sync.events.bus import create_event_bus, get_event_bus, set_event_bus
from crowdfund_sync.events.contributions import ContributionRecordedEvent
from crowdfund_sync.events.sync import SyncCycleFailedEvent
from crowdfund_sync.events.transactions import TransactionStatusChangedEvent

__all__ = [
    "ContributionRecordedEvent",
    "SyncCycleFailedEvent",
    "TransactionStatusChangedEvent",
    "create_event_bus",
    "get_event_bus",
    "set_event_bus",
]
