# -*- coding: utf-8 -*-
"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Optional

import pytest

from crowdfund_sync.clients.ledger.base import ILedgerClient, LedgerTxStatus
from crowdfund_sync.config.config import (
    ConsoleNotificationSettings,
    LedgerSettings,
    SyncSettings,
    TrackerSettings,
)
from crowdfund_sync.events.bus import create_event_bus
from crowdfund_sync.models.ledger_event import LedgerEvent, LedgerEventType
from crowdfund_sync.models.project import Project, ProjectStatus
from crowdfund_sync.persistence.repositories.in_memory import (
    InMemoryContributionRepository,
    InMemoryProjectRepository,
    InMemorySyncCursorRepository,
    InMemoryTransactionRepository,
    InMemoryUserRepository,
)

CONFIRMED = LedgerTxStatus(finalized=True, success=True, raw_status="success", block_height=120)
ABORTED = LedgerTxStatus(
    finalized=True,
    success=False,
    raw_status="abort_by_response",
    error="Transaction aborted: abort_by_response",
)
PENDING = LedgerTxStatus.pending()


class FakeLedger(ILedgerClient):
    """Scriptable ledger double.

    Status scripts are consumed in order; the last entry repeats. Exceptions
    in a script are raised. fetch_errors are raised (in order) before events
    are served.
    """

    def __init__(self) -> None:
        self.statuses: dict[str, list[LedgerTxStatus | Exception]] = {}
        self.events: list[LedgerEvent] = []
        self.fetch_errors: list[Exception] = []
        self.status_calls: list[str] = []
        self.fetch_calls: list[tuple[int, Optional[frozenset[LedgerEventType]]]] = []
        self.submitted: list[str] = []
        self.next_tx_id = "0x" + "ab" * 32

    def script_status(self, tx_id: str, *results: LedgerTxStatus | Exception) -> None:
        self.statuses[tx_id] = list(results)

    async def submit(self, signed_transfer: str) -> str:
        self.submitted.append(signed_transfer)
        return self.next_tx_id

    async def query_status(self, tx_id: str) -> LedgerTxStatus:
        self.status_calls.append(tx_id)
        script = self.statuses.get(tx_id)
        if not script:
            return PENDING
        item = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(item, Exception):
            raise item
        return item

    async def fetch_events(
        self,
        since_block: int,
        event_types: Optional[Iterable[LedgerEventType]] = None,
    ) -> list[LedgerEvent]:
        wanted = frozenset(event_types) if event_types is not None else None
        self.fetch_calls.append((since_block, wanted))
        if self.fetch_errors:
            raise self.fetch_errors.pop(0)
        return [
            e
            for e in self.events
            if e.block_height > since_block and (wanted is None or e.type in wanted)
        ]


class FakeClock:
    """Monotonic clock advanced only by its own sleep()."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeEventBus:
    """Minimal event bus fake for asserting dispatched events."""

    def __init__(self) -> None:
        self.dispatched: list[Any] = []
        self.handlers: dict[str, list[Any]] = {}

    def on(self, event_type: type, handler: Any) -> None:
        self.handlers.setdefault(event_type.__name__, []).append(handler)

    def dispatch(self, event: Any) -> None:
        self.dispatched.append(event)
        for handler in self.handlers.get(type(event).__name__, []):
            handler(event)


@pytest.fixture
def wallet() -> str:
    """Default contributor wallet used by tests."""
    return "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"


@pytest.fixture
def other_wallet() -> str:
    return "SP2J6ZY48GV1EZ5V2V5RB9MP66SW86PYKKNRV9EJ7"


@pytest.fixture
def creator_wallet() -> str:
    return "0x01cf0e2f2f715450"


@pytest.fixture
def now_utc() -> datetime:
    """Stable UTC timestamp for deterministic assertions."""
    return datetime(2026, 2, 13, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def tx_id() -> Callable[[int], str]:
    """tx_id(7) -> '0x000...07' (64 hex digits)."""
    return lambda n: f"0x{n:064x}"


@pytest.fixture
def settings() -> Any:
    """Minimal settings object with real section models and fast test timings."""
    return SimpleNamespace(
        ledger=LedgerSettings(events_url="https://indexer.test/events"),
        tracker=TrackerSettings(
            wait_timeout_seconds=10.0,
            wait_poll_interval_seconds=2.0,
            max_poll_attempts=5,
            backoff_initial_seconds=0.1,
            backoff_max_seconds=8.0,
            backoff_multiplier=2.0,
        ),
        sync=SyncSettings(
            poll_interval_seconds=60.0,
            start_block=0,
            max_attempts=5,
            backoff_initial_seconds=1.0,
            backoff_max_seconds=8.0,
            stop_timeout_seconds=1.0,
        ),
        console=ConsoleNotificationSettings(enabled=True),
    )


@pytest.fixture
def fake_ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_bus() -> FakeEventBus:
    return FakeEventBus()


@pytest.fixture
def project_repo() -> InMemoryProjectRepository:
    """Fresh in-memory project repository per test."""
    return InMemoryProjectRepository()


@pytest.fixture
def contribution_repo(project_repo: InMemoryProjectRepository) -> InMemoryContributionRepository:
    """Fresh in-memory contribution repository bound to project_repo."""
    return InMemoryContributionRepository(project_repo)


@pytest.fixture
def transaction_repo() -> InMemoryTransactionRepository:
    return InMemoryTransactionRepository()


@pytest.fixture
def cursor_repo() -> InMemorySyncCursorRepository:
    return InMemorySyncCursorRepository()


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def project_factory(creator_wallet: str) -> Callable[..., Project]:
    """Build an ACTIVE Project with sensible defaults and easy overrides."""
    counter = iter(range(1, 10_000))

    def _build(**overrides: Any) -> Project:
        return Project.create(
            ledger_project_id=overrides.pop("ledger_project_id", f"project-{next(counter)}"),
            title=overrides.pop("title", "Community garden"),
            creator_address=overrides.pop("creator_address", creator_wallet),
            funding_goal=overrides.pop("funding_goal", 1_000),
            deadline=overrides.pop("deadline", None),
            status=overrides.pop("status", ProjectStatus.ACTIVE),
            id=overrides.pop("id", None),
            created_at=overrides.pop("created_at", None),
        )

    return _build


@pytest.fixture
def event_factory() -> Callable[..., LedgerEvent]:
    """Build a LedgerEvent: event_factory(LedgerEventType.CONTRIBUTION_MADE, 10, 0, tx_id='0x..', **data)."""

    def _build(
        event_type: LedgerEventType,
        block_height: int,
        event_index: int = 0,
        *,
        tx_id: str,
        **data: Any,
    ) -> LedgerEvent:
        return LedgerEvent(
            type=event_type,
            block_height=block_height,
            event_index=event_index,
            tx_id=tx_id,
            data=data,
        )

    return _build


@pytest.fixture
def event_bus() -> Any:
    """Isolated event bus instance for tests."""
    return create_event_bus("CrowdfundSyncTests", max_history_size=200)
