"""Typed shapes of ledger API responses (only the fields read here)."""

from __future__ import annotations

from typing import Any, NotRequired, TypedDict


class TxResultResponse(TypedDict):
    hex: NotRequired[str]
    repr: NotRequired[str]


class TxStatusResponse(TypedDict):
    """GET /extended/v1/tx/{tx_id}."""

    tx_id: str
    tx_status: str
    """pending, success, abort_by_response, abort_by_post_condition, dropped_*."""
    block_height: NotRequired[int]
    tx_result: NotRequired[TxResultResponse]


class SubmitErrorResponse(TypedDict):
    error: str
    reason: NotRequired[str]
    txid: NotRequired[str]


class EventFeedItem(TypedDict):
    type: str
    block_height: int
    event_index: NotRequired[int]
    tx_id: str
    block_time: NotRequired[int | str]
    data: NotRequired[dict[str, Any]]


class EventFeedPage(TypedDict):
    results: list[EventFeedItem]
