# -*- coding: utf-8 -*-
"""Unit tests for SyncEngine."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock

import pytest
from conftest import FakeClock, FakeEventBus, FakeLedger

from crowdfund_sync.events.sync import SyncCycleFailedEvent
from crowdfund_sync.exceptions import LedgerAPIError, ValidationFailedError
from crowdfund_sync.models.ledger_event import LedgerEvent, LedgerEventType
from crowdfund_sync.models.project import ProjectStatus
from crowdfund_sync.models.sync_cursor import SyncCursor
from crowdfund_sync.persistence.repositories.in_memory import (
    InMemoryContributionRepository,
    InMemoryProjectRepository,
    InMemorySyncCursorRepository,
    InMemoryUserRepository,
)
from crowdfund_sync.services.contribution import ContributionRecorder
from crowdfund_sync.services.project_state import ProjectStateUpdater
from crowdfund_sync.services.sync import SyncEngine


class _UnreachableCursorRepository(InMemorySyncCursorRepository):
    async def get(self, name: str) -> SyncCursor | None:
        raise ConnectionError("cursor store unreachable")


class _GatedLedger(FakeLedger):
    """Blocks fetch_events on gate once gated is set."""

    def __init__(self) -> None:
        super().__init__()
        self.gated = False
        self.gate = asyncio.Event()
        self.entered = asyncio.Event()

    async def fetch_events(self, since_block: int, event_types: Any = None) -> list[LedgerEvent]:
        if self.gated:
            self.entered.set()
            await self.gate.wait()
        return await super().fetch_events(since_block, event_types)


def _build_engine(
    ledger: FakeLedger,
    recorder: ContributionRecorder,
    project_repo: Any,
    user_repo: Any,
    cursors: Any,
    settings: Any,
    **kwargs: Any,
) -> SyncEngine:
    return SyncEngine(
        ledger,
        recorder,
        ProjectStateUpdater(project_repo, user_repo, settings),
        project_repo,
        cursors,
        settings,
        **kwargs,
    )


@pytest.fixture
def recorder(
    contribution_repo: InMemoryContributionRepository,
    project_repo: InMemoryProjectRepository,
    user_repo: InMemoryUserRepository,
) -> ContributionRecorder:
    return ContributionRecorder(contribution_repo, project_repo, user_repo)


@pytest.fixture
def engine(
    fake_ledger: FakeLedger,
    recorder: ContributionRecorder,
    project_repo: InMemoryProjectRepository,
    user_repo: InMemoryUserRepository,
    cursor_repo: InMemorySyncCursorRepository,
    settings: Any,
    fake_bus: FakeEventBus,
    fake_clock: FakeClock,
) -> SyncEngine:
    return SyncEngine(
        fake_ledger,
        recorder,
        ProjectStateUpdater(project_repo, user_repo, settings),
        project_repo,
        cursor_repo,
        settings,
        event_bus=fake_bus,
        sleep=fake_clock.sleep,
    )


@pytest.fixture
def created(event_factory: Callable[..., LedgerEvent], creator_wallet: str) -> Callable[..., LedgerEvent]:
    def _build(block: int, project_id: str = "p-1", goal: int = 1_000, index: int = 0) -> LedgerEvent:
        return event_factory(
            LedgerEventType.PROJECT_CREATED,
            block,
            index,
            tx_id=f"0xc{block}{index}",
            projectId=project_id,
            creator=creator_wallet,
            title="Library",
            goal=goal,
        )

    return _build


@pytest.fixture
def contributed(event_factory: Callable[..., LedgerEvent], wallet: str) -> Callable[..., LedgerEvent]:
    def _build(
        block: int,
        amount: Any,
        index: int = 0,
        project_id: str = "p-1",
        contributor: str | None = None,
    ) -> LedgerEvent:
        return event_factory(
            LedgerEventType.CONTRIBUTION_MADE,
            block,
            index,
            tx_id=f"0xa{block}{index}",
            projectId=project_id,
            contributor=contributor or wallet,
            amount=amount,
        )

    return _build


async def test_full_sync_replays_in_ledger_order_and_advances_cursor(
    engine: SyncEngine,
    fake_ledger: FakeLedger,
    recorder: ContributionRecorder,
    project_repo: InMemoryProjectRepository,
    cursor_repo: InMemorySyncCursorRepository,
    created: Callable[..., LedgerEvent],
    contributed: Callable[..., LedgerEvent],
    event_factory: Callable[..., LedgerEvent],
    other_wallet: str,
) -> None:
    spy = AsyncMock(wraps=recorder.record)
    recorder.record = spy  # type: ignore[method-assign]
    fake_ledger.events = [
        event_factory(LedgerEventType.FUNDS_WITHDRAWN, 15, tx_id="0xw15", projectId="p-1"),
        contributed(12, 600, index=1),
        contributed(12, 400, index=0, contributor=other_wallet),
        created(10),
    ]

    report = await engine.sync_all()

    assert report.projects_synced == 1
    assert report.contributions_synced == 2
    assert report.withdrawals_synced == 1
    assert report.events_processed == 4
    assert (report.from_block, report.to_block) == (0, 15)
    assert [c.args[3] for c in spy.call_args_list] == ["0xa120", "0xa121"]
    project = await project_repo.get_by_ledger_id("p-1")
    assert project is not None
    assert project.total_raised == 1_000
    assert project.contributor_count == 2
    assert project.status is ProjectStatus.WITHDRAWN
    cursor = await cursor_repo.get("all")
    assert cursor is not None
    assert cursor.last_synced_block == 15


async def test_next_cycle_starts_after_cursor_and_keeps_it_when_nothing_new(
    engine: SyncEngine,
    fake_ledger: FakeLedger,
    cursor_repo: InMemorySyncCursorRepository,
    created: Callable[..., LedgerEvent],
) -> None:
    fake_ledger.events = [created(10)]
    await engine.sync_all()

    report = await engine.sync_all()

    assert fake_ledger.fetch_calls[-1] == (10, None)
    assert report.to_block is None
    assert report.events_processed == 0
    cursor = await cursor_repo.get("all")
    assert cursor is not None
    assert cursor.last_synced_block == 10


async def test_replay_after_cursor_reset_is_idempotent(
    engine: SyncEngine,
    fake_ledger: FakeLedger,
    project_repo: InMemoryProjectRepository,
    cursor_repo: InMemorySyncCursorRepository,
    created: Callable[..., LedgerEvent],
    contributed: Callable[..., LedgerEvent],
) -> None:
    fake_ledger.events = [created(10), contributed(11, 250)]
    await engine.sync_all()
    await cursor_repo.save(SyncCursor.initial("all"))

    report = await engine.sync_all()

    assert report.already_synced == 2
    assert report.contributions_synced == 0
    project = await project_repo.get_by_ledger_id("p-1")
    assert project is not None
    assert project.total_raised == 250


async def test_contribution_recorded_by_request_path_counts_as_already_synced(
    engine: SyncEngine,
    fake_ledger: FakeLedger,
    recorder: ContributionRecorder,
    project_repo: InMemoryProjectRepository,
    created: Callable[..., LedgerEvent],
    contributed: Callable[..., LedgerEvent],
    wallet: str,
) -> None:
    fake_ledger.events = [created(10)]
    await engine.sync_all()
    project = await project_repo.get_by_ledger_id("p-1")
    assert project is not None
    await recorder.record(project.id, wallet, 250, "0xa110")
    fake_ledger.events.append(contributed(11, 250))

    report = await engine.sync_all()

    assert report.already_synced == 1
    stored = await project_repo.get(project.id)
    assert stored is not None
    assert stored.total_raised == 250


async def test_events_for_unknown_projects_are_skipped(
    engine: SyncEngine,
    fake_ledger: FakeLedger,
    cursor_repo: InMemorySyncCursorRepository,
    contributed: Callable[..., LedgerEvent],
) -> None:
    fake_ledger.events = [contributed(7, 100, project_id="missing")]

    report = await engine.sync_all()

    assert report.skipped == 1
    cursor = await cursor_repo.get("all")
    assert cursor is not None
    assert cursor.last_synced_block == 7


async def test_refund_expires_active_project(
    engine: SyncEngine,
    fake_ledger: FakeLedger,
    project_repo: InMemoryProjectRepository,
    created: Callable[..., LedgerEvent],
    event_factory: Callable[..., LedgerEvent],
) -> None:
    fake_ledger.events = [
        created(10),
        event_factory(LedgerEventType.REFUND_PROCESSED, 20, tx_id="0xr20", projectId="p-1"),
    ]

    report = await engine.sync_all()

    assert report.refunds_synced == 1
    project = await project_repo.get_by_ledger_id("p-1")
    assert project is not None
    assert project.status is ProjectStatus.EXPIRED


async def test_transient_failures_are_retried_with_backoff(
    engine: SyncEngine,
    fake_ledger: FakeLedger,
    fake_clock: FakeClock,
    created: Callable[..., LedgerEvent],
) -> None:
    fake_ledger.events = [created(10)]
    fake_ledger.fetch_errors = [LedgerAPIError("502"), ConnectionError("reset")]

    report = await engine.sync_all()

    assert report.projects_synced == 1
    assert len(fake_ledger.fetch_calls) == 3
    assert fake_clock.sleeps == [1.0, 2.0]


async def test_exhausted_retries_report_failure_and_keep_cursor(
    engine: SyncEngine,
    fake_ledger: FakeLedger,
    fake_clock: FakeClock,
    fake_bus: FakeEventBus,
    cursor_repo: InMemorySyncCursorRepository,
) -> None:
    seen: list[Exception] = []
    engine.on_error(seen.append)
    await cursor_repo.save(SyncCursor.initial("all", 40))
    fake_ledger.fetch_errors = [LedgerAPIError(f"down {n}") for n in range(5)]

    with pytest.raises(LedgerAPIError, match="down 4"):
        await engine.sync_all()

    assert fake_clock.sleeps == [1.0, 2.0, 4.0, 8.0]
    assert len(seen) == 1
    failures = [e for e in fake_bus.dispatched if isinstance(e, SyncCycleFailedEvent)]
    assert len(failures) == 1
    assert failures[0].operation == "sync_all"
    assert failures[0].last_synced_block == 40
    cursor = await cursor_repo.get("all")
    assert cursor is not None
    assert cursor.last_synced_block == 40


async def test_non_transient_failure_mid_batch_fails_fast_and_keeps_cursor(
    engine: SyncEngine,
    fake_ledger: FakeLedger,
    fake_clock: FakeClock,
    cursor_repo: InMemorySyncCursorRepository,
    project_repo: InMemoryProjectRepository,
    created: Callable[..., LedgerEvent],
    contributed: Callable[..., LedgerEvent],
) -> None:
    fake_ledger.events = [created(10), contributed(18, 100), contributed(20, "lots")]

    with pytest.raises(ValidationFailedError):
        await engine.sync_all()

    assert len(fake_ledger.fetch_calls) == 1
    assert fake_clock.sleeps == []
    assert await cursor_repo.get("all") is None
    project = await project_repo.get_by_ledger_id("p-1")
    assert project is not None
    assert project.total_raised == 100


async def test_unsubscribed_error_observer_is_not_called(
    engine: SyncEngine,
    fake_ledger: FakeLedger,
) -> None:
    seen: list[Exception] = []
    unsubscribe = engine.on_error(seen.append)
    unsubscribe()
    fake_ledger.fetch_errors = [ValidationFailedError("bad feed")]

    with pytest.raises(ValidationFailedError):
        await engine.sync_all()

    assert seen == []


async def test_scoped_sync_uses_its_own_cursor_and_event_filter(
    engine: SyncEngine,
    fake_ledger: FakeLedger,
    cursor_repo: InMemorySyncCursorRepository,
    created: Callable[..., LedgerEvent],
    contributed: Callable[..., LedgerEvent],
) -> None:
    fake_ledger.events = [created(10), contributed(12, 100)]

    projects_report = await engine.sync_projects()
    contributions_report = await engine.sync_contributions()

    assert projects_report.projects_synced == 1
    assert contributions_report.contributions_synced == 1
    assert fake_ledger.fetch_calls == [
        (0, frozenset({LedgerEventType.PROJECT_CREATED})),
        (0, frozenset({LedgerEventType.CONTRIBUTION_MADE})),
    ]
    projects_cursor = await cursor_repo.get("projects")
    contributions_cursor = await cursor_repo.get("contributions")
    assert projects_cursor is not None and projects_cursor.last_synced_block == 10
    assert contributions_cursor is not None and contributions_cursor.last_synced_block == 12
    assert await cursor_repo.get("all") is None


async def test_withdrawals_and_refunds_scopes(engine: SyncEngine, fake_ledger: FakeLedger) -> None:
    await engine.sync_withdrawals()
    await engine.sync_refunds()

    assert [types for _, types in fake_ledger.fetch_calls] == [
        frozenset({LedgerEventType.FUNDS_WITHDRAWN}),
        frozenset({LedgerEventType.REFUND_PROCESSED}),
    ]


async def test_unknown_scope_is_rejected(engine: SyncEngine) -> None:
    with pytest.raises(ValueError, match="Unknown sync scope"):
        await engine.trigger_sync("everything")  # type: ignore[arg-type]


async def test_start_runs_first_cycle_and_stop_ends_schedule(
    engine: SyncEngine,
    fake_ledger: FakeLedger,
    created: Callable[..., LedgerEvent],
) -> None:
    fake_ledger.events = [created(10)]

    await engine.start()
    assert engine.is_running is True
    assert len(fake_ledger.fetch_calls) == 1

    await engine.start()
    assert len(fake_ledger.fetch_calls) == 1

    await engine.stop()
    assert engine.is_running is False
    await engine.stop()


async def test_start_survives_failing_first_cycle(
    engine: SyncEngine,
    fake_ledger: FakeLedger,
    fake_bus: FakeEventBus,
) -> None:
    fake_ledger.fetch_errors = [ValidationFailedError("bad feed")]

    await engine.start()

    assert engine.is_running is True
    assert any(isinstance(e, SyncCycleFailedEvent) for e in fake_bus.dispatched)
    await engine.stop()


async def test_cursor_store_outage_still_reaches_error_observers(
    fake_ledger: FakeLedger,
    recorder: ContributionRecorder,
    project_repo: InMemoryProjectRepository,
    user_repo: InMemoryUserRepository,
    settings: Any,
    fake_bus: FakeEventBus,
    fake_clock: FakeClock,
) -> None:
    engine = _build_engine(
        fake_ledger,
        recorder,
        project_repo,
        user_repo,
        _UnreachableCursorRepository(),
        settings,
        event_bus=fake_bus,
        sleep=fake_clock.sleep,
    )
    seen: list[Exception] = []
    engine.on_error(seen.append)

    with pytest.raises(ConnectionError, match="cursor store unreachable"):
        await engine.sync_all()

    assert fake_clock.sleeps == [1.0, 2.0, 4.0, 8.0]
    assert len(seen) == 1 and isinstance(seen[0], ConnectionError)
    failures = [e for e in fake_bus.dispatched if isinstance(e, SyncCycleFailedEvent)]
    assert len(failures) == 1
    assert failures[0].last_synced_block == settings.sync.start_block
    assert fake_ledger.fetch_calls == []


async def test_failed_batch_is_refetched_and_reapplied_next_cycle(
    engine: SyncEngine,
    fake_ledger: FakeLedger,
    cursor_repo: InMemorySyncCursorRepository,
    project_repo: InMemoryProjectRepository,
    created: Callable[..., LedgerEvent],
    contributed: Callable[..., LedgerEvent],
) -> None:
    fake_ledger.events = [created(10), contributed(18, 100), contributed(20, "lots")]
    with pytest.raises(ValidationFailedError):
        await engine.sync_all()

    fake_ledger.events[2] = contributed(20, 50)
    report = await engine.sync_all()

    assert [since for since, _ in fake_ledger.fetch_calls] == [0, 0]
    assert report.already_synced == 2
    assert report.contributions_synced == 1
    project = await project_repo.get_by_ledger_id("p-1")
    assert project is not None
    assert project.total_raised == 150
    assert project.contributor_count == 1
    cursor = await cursor_repo.get("all")
    assert cursor is not None and cursor.last_synced_block == 20


async def test_scheduled_loop_keeps_running_after_failed_interval(
    engine: SyncEngine,
    fake_ledger: FakeLedger,
    settings: Any,
    created: Callable[..., LedgerEvent],
) -> None:
    settings.sync = settings.sync.model_copy(update={"poll_interval_seconds": 0.01})
    seen: list[Exception] = []
    engine.on_error(seen.append)
    fake_ledger.events = [created(10)]
    await engine.start()
    fake_ledger.fetch_errors = [ValidationFailedError("bad feed")]

    async def _three_fetches() -> None:
        while len(fake_ledger.fetch_calls) < 3:
            await asyncio.sleep(0.01)

    try:
        await asyncio.wait_for(_three_fetches(), timeout=2.0)
    finally:
        await engine.stop()

    assert len(seen) == 1 and isinstance(seen[0], ValidationFailedError)
    assert len(fake_ledger.fetch_calls) >= 3


async def test_stop_waits_for_in_flight_cycle_to_finish(
    recorder: ContributionRecorder,
    project_repo: InMemoryProjectRepository,
    user_repo: InMemoryUserRepository,
    cursor_repo: InMemorySyncCursorRepository,
    settings: Any,
    created: Callable[..., LedgerEvent],
    contributed: Callable[..., LedgerEvent],
) -> None:
    settings.sync = settings.sync.model_copy(update={"poll_interval_seconds": 0.01})
    ledger = _GatedLedger()
    engine = _build_engine(ledger, recorder, project_repo, user_repo, cursor_repo, settings)
    ledger.events = [created(10)]
    await engine.start()
    ledger.events.append(contributed(12, 100))
    ledger.gated = True
    await asyncio.wait_for(ledger.entered.wait(), timeout=2.0)

    stopping = asyncio.create_task(engine.stop())
    await asyncio.sleep(0.05)
    assert not stopping.done()
    cursor = await cursor_repo.get("all")
    assert cursor is not None and cursor.last_synced_block == 10

    ledger.gate.set()
    await asyncio.wait_for(stopping, timeout=2.0)

    cursor = await cursor_repo.get("all")
    assert cursor is not None and cursor.last_synced_block == 12
    project = await project_repo.get_by_ledger_id("p-1")
    assert project is not None and project.total_raised == 100
    assert engine.is_running is False
