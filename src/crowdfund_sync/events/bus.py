"""Process-wide bubus bus carrying transaction, contribution and sync events."""

from __future__ import annotations

from bubus import EventBus  # type: ignore[import-untyped]

_current: EventBus | None = None


def create_event_bus(name: str = "CrowdfundSync", *, max_history_size: int = 100) -> EventBus:
    """New in-memory bus (no write-ahead log)."""
    return EventBus(name=name, max_history_size=max_history_size, wal_path=None)


def get_event_bus() -> EventBus:
    """Shared bus, created on first use."""
    global _current
    if _current is None:
        _current = create_event_bus()
    return _current


def set_event_bus(bus: EventBus | None) -> None:
    """Replace the shared bus; None makes the next get_event_bus() build a fresh one."""
    global _current
    _current = bus
