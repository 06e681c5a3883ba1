# -*- coding: utf-8 -*-
"""Exponential backoff retry for async operations."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

_logger = structlog.get_logger("backoff")


async def retry_with_backoff[T](
    operation: Callable[[], Awaitable[T]],
    max_attempts: int,
    initial_delay: float,
    max_delay: float | None = None,
    multiplier: float = 2.0,
    *,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    operation_name: str | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    logger: Any = None,
) -> T:
    """Run operation until it succeeds or max_attempts consecutive failures.

    The first attempt runs immediately. After each failure the caller is
    suspended for the current delay, then the delay is multiplied by
    multiplier and capped at max_delay (default 10x initial_delay).

    Args:
        operation: Zero-argument coroutine factory; called once per attempt.
        max_attempts: Total attempts including the first.
        initial_delay: Seconds to wait after the first failure.
        max_delay: Upper bound for a single wait in seconds.
        multiplier: Growth factor applied after every failed attempt.
        retry_on: Exception types that trigger a retry. Anything else
            propagates immediately.
        operation_name: Label for log events.
        sleep: Suspension function (injected for tests).
        logger: Logger to use (defaults to the module logger).

    Returns:
        The result of the first successful attempt.

    Raises:
        The last exception raised by operation once attempts are exhausted,
        or the first exception not listed in retry_on.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    if initial_delay < 0:
        raise ValueError("initial_delay must be >= 0")

    log = logger or _logger
    name = operation_name or getattr(operation, "__name__", "operation")
    cap = max_delay if max_delay is not None else initial_delay * 10
    delay = initial_delay

    for attempt in range(1, max_attempts + 1):
        try:
            result = await operation()
        except retry_on as e:
            if attempt == max_attempts:
                log.warning(
                    "retry_exhausted",
                    retry_operation=name,
                    retry_attempts=max_attempts,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                raise
            wait = min(delay, cap)
            log.info(
                "retry_scheduled",
                retry_operation=name,
                retry_attempt=attempt,
                retry_max_attempts=max_attempts,
                retry_delay_seconds=wait,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            await sleep(wait)
            delay = min(delay * multiplier, cap)
            continue

        if attempt > 1:
            log.info(
                "retry_succeeded",
                retry_operation=name,
                retry_count=attempt - 1,
            )
        return result

    # Unreachable: the loop either returns or raises.
    raise RuntimeError("retry_with_backoff exited without result")
