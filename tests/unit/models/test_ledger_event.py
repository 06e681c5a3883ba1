# -*- coding: utf-8 -*-
"""Unit tests for LedgerEvent parsing."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from crowdfund_sync.models.ledger_event import LedgerEvent, LedgerEventType


def test_parse_accepts_qualified_event_names() -> None:
    assert (
        LedgerEventType.parse("A.0x01cf0e2f2f715450.Crowdfunding.ContributionMade")
        is LedgerEventType.CONTRIBUTION_MADE
    )
    assert LedgerEventType.parse("FundsWithdrawn") is LedgerEventType.FUNDS_WITHDRAWN


def test_parse_rejects_unknown_event_names() -> None:
    with pytest.raises(ValueError):
        LedgerEventType.parse("A.0x1.Crowdfunding.Unrelated")


def test_from_response_reads_camel_case_feed_items() -> None:
    event = LedgerEvent.from_response(
        {
            "type": "A.0x01cf0e2f2f715450.Crowdfunding.ProjectCreated",
            "blockHeight": "17",
            "eventIndex": 2,
            "transactionId": "0xfeed",
            "blockTimestamp": "2026-02-13T12:00:00Z",
            "data": {"projectId": "p-1", "goal": 1000},
        }
    )

    assert event.type is LedgerEventType.PROJECT_CREATED
    assert event.block_height == 17
    assert event.event_index == 2
    assert event.tx_id == "0xfeed"
    assert event.data == {"projectId": "p-1", "goal": 1000}
    assert event.block_timestamp == datetime(2026, 2, 13, 12, 0, 0, tzinfo=timezone.utc)
    assert event.sort_key == (17, 2)


def test_from_response_reads_snake_case_and_defaults_index() -> None:
    event = LedgerEvent.from_response(
        {"event_type": "RefundProcessed", "block_height": 5, "tx_id": "0x1", "block_time": 0}
    )

    assert event.type is LedgerEventType.REFUND_PROCESSED
    assert event.event_index == 0
    assert event.data == {}
    assert event.block_timestamp == datetime(1970, 1, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "item",
    [
        {"blockHeight": 1, "transactionId": "0x1"},
        {"type": "ContributionMade", "transactionId": "0x1"},
        {"type": "ContributionMade", "blockHeight": 1},
        {"type": "ContributionMade", "blockHeight": -1, "transactionId": "0x1"},
        {"type": "ContributionMade", "blockHeight": "x", "transactionId": "0x1"},
        {"type": "ContributionMade", "blockHeight": 1, "transactionId": "0x1", "data": [1]},
    ],
)
def test_from_response_rejects_malformed_items(item: dict[str, object]) -> None:
    with pytest.raises(ValueError):
        LedgerEvent.from_response(item)
