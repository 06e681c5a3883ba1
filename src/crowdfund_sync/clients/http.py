# -*- coding: utf-8 -*-
"""aiohttp wrapper used by the ledger client."""

from __future__ import annotations

import asyncio
import uuid
import aiohttp
import structlog
from typing import Any, Callable, Dict, Optional
from structlog.contextvars import bound_contextvars

from crowdfund_sync.config import Settings
from crowdfund_sync.exceptions import LedgerAPIError, RateLimitError
from crowdfund_sync.utils.backoff import retry_with_backoff

_FIRST_RETRY_DELAY = 0.25
_MAX_RETRY_DELAY = 4.0


class _RetryableResponse(Exception):
    """One failed attempt worth repeating (network error, timeout, 5xx or 429)."""

    def __init__(
        self,
        reason: str,
        *,
        status: Optional[int] = None,
        retry_after: Optional[float] = None,
    ) -> None:
        super().__init__(reason)
        self.status = status
        self.retry_after = retry_after


def _retry_after_seconds(response: aiohttp.ClientResponse) -> Optional[float]:
    header = response.headers.get("Retry-After")
    if not header:
        return None
    try:
        return max(0.0, float(header))
    except ValueError:
        return None


class AsyncHttpClient:
    """JSON-over-HTTP client for the ledger node and the event indexer.

    Each request gets up to ledger.max_retries attempts. Network errors,
    timeouts, 5xx and 429 are retried (429 waits Retry-After first when the
    node sends one). Any other 4xx raises LedgerAPIError at once with the
    status code, so callers can treat 404 as "not indexed yet".

    The aiohttp session is created lazily and owned by the client unless one
    is injected.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._settings = settings
        self._session = session
        self._owns_session = session is None
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def __aenter__(self) -> AsyncHttpClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the session when this client created it."""
        if not self._owns_session or self._session is None:
            return
        if not self._session.closed:
            await self._session.close()
        self._session = None

    def _session_for_request(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._settings.ledger.timeout_seconds)
            )
        return self._session

    async def get(self, url: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET url and return the decoded JSON body (text when not JSON)."""
        return await self._request("GET", url, params=params or {})

    async def post(self, url: str, *, json: Optional[Any] = None) -> Any:
        """POST a JSON body to url and return the decoded response."""
        return await self._request("POST", url, json=json if json is not None else {})

    async def _send_once(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]],
        json: Optional[Any],
    ) -> Any:
        try:
            session = self._session_for_request()
            async with session.request(method, url, params=params, json=json) as response:
                status = response.status
                if status == 429:
                    retry_after = _retry_after_seconds(response)
                    self._logger.warning(
                        "http_rate_limited",
                        http_status_code=status,
                        http_retry_after_seconds=retry_after,
                    )
                    if retry_after:
                        await asyncio.sleep(retry_after)
                    raise _RetryableResponse("rate limited", status=status, retry_after=retry_after)
                if status >= 500:
                    raise _RetryableResponse(f"server error {status}", status=status)
                if status >= 400:
                    body = await response.text()
                    self._logger.warning(
                        "http_client_error",
                        http_status_code=status,
                        http_body=body[:500],
                    )
                    raise LedgerAPIError(f"{method} {url} returned {status}", url=url, status_code=status)
                if response.content_type == "application/json":
                    return await response.json()
                return await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise _RetryableResponse(f"{type(e).__name__}: {e}") from e

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> Any:
        attempts = self._settings.ledger.max_retries
        with bound_contextvars(
            http_method=method,
            http_url=url,
            http_request_id=uuid.uuid4().hex[:12],
        ):
            try:
                return await retry_with_backoff(
                    lambda: self._send_once(method, url, params, json),
                    max_attempts=attempts,
                    initial_delay=_FIRST_RETRY_DELAY,
                    max_delay=_MAX_RETRY_DELAY,
                    retry_on=(_RetryableResponse,),
                    operation_name=f"http_{method.lower()}",
                    logger=self._logger,
                )
            except _RetryableResponse as e:
                self._logger.error(
                    "http_request_failed",
                    http_status_code=e.status,
                    http_attempts=attempts,
                    error_message=str(e),
                )
                if e.status == 429:
                    raise RateLimitError(url=url, retry_after=e.retry_after) from e
                raise LedgerAPIError(
                    f"{method} failed after {attempts} attempts: {url}",
                    url=url,
                    status_code=e.status,
                    cause=e.__cause__ if isinstance(e.__cause__, Exception) else e,
                ) from e
