# -*- coding: utf-8 -*-
"""HTTP ledger client over the Stacks node/indexer API."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional
from urllib.parse import quote

import structlog

from crowdfund_sync.clients.http import AsyncHttpClient
from crowdfund_sync.clients.ledger.base import ILedgerClient, LedgerTxStatus
from crowdfund_sync.clients.ledger.schema import TxStatusResponse
from crowdfund_sync.config import Settings
from crowdfund_sync.exceptions import LedgerAPIError
from crowdfund_sync.models.ledger_event import LedgerEvent, LedgerEventType

_SUCCESS_STATUSES = frozenset({"success"})
_FAILED_STATUSES = frozenset({"abort_by_response", "abort_by_post_condition"})
_FAILED_PREFIXES = ("dropped_",)


def map_tx_status(payload: TxStatusResponse | dict[str, Any]) -> LedgerTxStatus:
    """Map a transaction payload to LedgerTxStatus.

    success is final success; aborts and dropped_* are final failure; anything
    else (pending, microblock states, unknown values) is still pending.
    """
    raw = str(payload.get("tx_status") or "pending")
    height = payload.get("block_height")
    block_height = int(height) if isinstance(height, int) and height > 0 else None
    if raw in _SUCCESS_STATUSES:
        return LedgerTxStatus(finalized=True, success=True, raw_status=raw, block_height=block_height)
    if raw in _FAILED_STATUSES or raw.startswith(_FAILED_PREFIXES):
        result = payload.get("tx_result") or {}
        detail = result.get("repr") if isinstance(result, dict) else None
        error = f"Transaction aborted: {raw}" if raw.startswith("abort") else f"Transaction dropped: {raw}"
        if detail:
            error = f"{error} ({detail})"
        return LedgerTxStatus(
            finalized=True,
            success=False,
            raw_status=raw,
            block_height=block_height,
            error=error,
        )
    return LedgerTxStatus.pending(raw)


class LedgerClient(ILedgerClient):
    """Ledger access via the node API (submit, tx status) and an optional event feed URL.

    Uses AsyncHttpClient for retries and rate limiting. A 404 on a status query
    means the transaction is not indexed yet and is reported as pending.
    """

    def __init__(
        self,
        http_client: AsyncHttpClient,
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._http = http_client
        self._settings = settings
        self._base_url = settings.ledger.api_host.rstrip("/")
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    async def submit(self, signed_transfer: str) -> str:
        """Broadcast a hex-encoded signed transfer and return the tx id."""
        payload = signed_transfer.strip().removeprefix("0x")
        if not payload:
            raise ValueError("signed_transfer must be non-empty")
        response = await self._http.post(self._url(self._settings.ledger.submit_path), json={"tx": payload})
        tx_id: Optional[str] = None
        if isinstance(response, str):
            tx_id = response.strip().strip('"')
        elif isinstance(response, dict):
            if response.get("error"):
                raise LedgerAPIError(
                    f"Broadcast rejected: {response.get('error')} ({response.get('reason', 'unknown')})",
                    url=self._url(self._settings.ledger.submit_path),
                )
            tx_id = str(response.get("txid") or response.get("tx_id") or "").strip()
        if not tx_id:
            raise LedgerAPIError("Broadcast returned no transaction id", url=self._url(self._settings.ledger.submit_path))
        if not tx_id.startswith("0x"):
            tx_id = f"0x{tx_id}"
        self._logger.info("ledger_transfer_submitted", tx_id=tx_id)
        return tx_id

    async def query_status(self, tx_id: str) -> LedgerTxStatus:
        path = self._settings.ledger.tx_status_path.format(tx_id=quote(tx_id, safe=""))
        try:
            payload = await self._http.get(self._url(path))
        except LedgerAPIError as e:
            if e.status_code == 404:
                self._logger.debug("ledger_tx_not_indexed", tx_id=tx_id)
                return LedgerTxStatus.pending("not_found")
            raise
        if not isinstance(payload, dict):
            raise LedgerAPIError(f"Unexpected status payload for {tx_id}", url=self._url(path))
        status = map_tx_status(payload)
        self._logger.debug(
            "ledger_tx_status",
            tx_id=tx_id,
            ledger_raw_status=status.raw_status,
            ledger_finalized=status.finalized,
        )
        return status

    async def fetch_events(
        self,
        since_block: int,
        event_types: Optional[Iterable[LedgerEventType]] = None,
    ) -> list[LedgerEvent]:
        events_url = self._settings.ledger.events_url
        if not events_url:
            return []
        params: dict[str, Any] = {"since_block": since_block}
        wanted = {t for t in event_types} if event_types is not None else None
        if wanted:
            params["types"] = ",".join(sorted(t.value for t in wanted))
        payload = await self._http.get(events_url, params=params)
        items = payload.get("results", []) if isinstance(payload, dict) else payload
        if not isinstance(items, list):
            raise LedgerAPIError("Unexpected event feed payload", url=events_url)

        events: list[LedgerEvent] = []
        for item in items:
            try:
                event = LedgerEvent.from_response(item)
            except (ValueError, TypeError, AttributeError) as e:
                self._logger.warning(
                    "ledger_event_malformed",
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                continue
            if event.block_height <= since_block:
                continue
            if wanted is not None and event.type not in wanted:
                continue
            events.append(event)
        self._logger.debug("ledger_events_fetched", since_block=since_block, event_count=len(events))
        return events

    async def aclose(self) -> None:
        await self._http.aclose()
