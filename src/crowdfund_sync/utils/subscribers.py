# -*- coding: utf-8 -*-
"""Ordered publish/subscribe registry with per-subscriber failure isolation."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

import structlog

Unsubscribe = Callable[[], None]


class SubscriberRegistry[T]:
    """Holds callbacks for one kind of notification and delivers values to them in order.

    Callbacks may be plain functions or coroutine functions. A callback that
    raises is logged and skipped; delivery continues with the next one.
    """

    def __init__(
        self,
        name: str,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        self._name = name
        self._subscribers: list[Callable[[T], Any]] = []
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def __len__(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Callable[[T], Any]) -> Unsubscribe:
        """Register callback and return a function that removes it again."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            try:
                self._subscribers.remove(callback)
            except ValueError:
                pass

        return _unsubscribe

    async def publish(self, value: T) -> int:
        """Deliver value to every subscriber. Returns how many succeeded."""
        delivered = 0
        for callback in list(self._subscribers):
            try:
                result = callback(value)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception as e:
                self._logger.exception(
                    "subscriber_failed",
                    registry=self._name,
                    subscriber=getattr(callback, "__qualname__", repr(callback)),
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
        return delivered
