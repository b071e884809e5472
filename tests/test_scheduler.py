from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

import pytest

from netsense.exceptions import CellPermissionError
from netsense.models.batch import CategorizedBatch
from netsense.models.device import EmptyResultCondition
from netsense.scheduler import CellScheduler, SchedulerState


@dataclass
class FakeCoordinator:
    """Counts cycles; optionally blocks each cycle until released."""

    errors: list[BaseException] = field(default_factory=list)
    block: bool = False
    calls: int = 0
    active: int = 0
    max_active: int = 0
    release: asyncio.Event = field(default_factory=asyncio.Event)

    async def acquire_cycle(self) -> CategorizedBatch:
        self.calls += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.block:
                await self.release.wait()
                self.release.clear()
            if self.errors:
                raise self.errors.pop(0)
            return CategorizedBatch(diagnostic=EmptyResultCondition.NO_SIGNAL)
        finally:
            self.active -= 1


async def _wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(_poll(), timeout)


@pytest.mark.asyncio
async def test_start_runs_one_cycle_immediately() -> None:
    coordinator = FakeCoordinator()
    batches: list[CategorizedBatch] = []
    scheduler = CellScheduler(coordinator, interval=60, on_batch=batches.append)  # type: ignore[arg-type]

    scheduler.start()
    assert scheduler.state is SchedulerState.RUNNING
    await _wait_for(lambda: scheduler.cycles_completed == 1)
    await asyncio.sleep(0.05)

    assert coordinator.calls == 1
    assert len(batches) == 1
    assert scheduler.latest_batch is batches[0]
    scheduler.stop()


@pytest.mark.asyncio
async def test_cycles_repeat_after_interval_without_overlap() -> None:
    coordinator = FakeCoordinator()
    scheduler = CellScheduler(coordinator, interval=0.01)  # type: ignore[arg-type]

    scheduler.start()
    await _wait_for(lambda: coordinator.calls >= 3)
    scheduler.stop()
    await scheduler.wait_idle()

    assert coordinator.max_active == 1


@pytest.mark.asyncio
async def test_stop_during_in_flight_cycle_prevents_reschedule() -> None:
    coordinator = FakeCoordinator(block=True)
    stopped: list[CellPermissionError | None] = []
    scheduler = CellScheduler(coordinator, interval=0.01, on_stopped=stopped.append)  # type: ignore[arg-type]

    scheduler.start()
    await _wait_for(lambda: coordinator.calls == 1)
    scheduler.stop()
    assert scheduler.state is SchedulerState.STOPPED
    assert scheduler.in_flight

    coordinator.release.set()
    await scheduler.wait_idle()
    await asyncio.sleep(0.05)

    assert coordinator.calls == 1
    assert scheduler.cycles_completed == 1
    assert stopped == [None]


@pytest.mark.asyncio
async def test_permission_error_stops_scheduler() -> None:
    error = CellPermissionError("revoked")
    coordinator = FakeCoordinator(errors=[error])
    stopped: list[CellPermissionError | None] = []
    scheduler = CellScheduler(coordinator, interval=0.01, on_stopped=stopped.append)  # type: ignore[arg-type]

    scheduler.start()
    await _wait_for(lambda: scheduler.state is SchedulerState.STOPPED)
    await asyncio.sleep(0.05)

    assert coordinator.calls == 1
    assert stopped == [error]
    assert scheduler.last_error is error


@pytest.mark.asyncio
async def test_other_failures_keep_scheduler_running() -> None:
    coordinator = FakeCoordinator(errors=[RuntimeError("boom")])
    scheduler = CellScheduler(coordinator, interval=0.01)  # type: ignore[arg-type]

    scheduler.start()
    await _wait_for(lambda: coordinator.calls >= 2)

    assert scheduler.state is SchedulerState.RUNNING
    scheduler.stop()
    await scheduler.wait_idle()


@pytest.mark.asyncio
async def test_restart_while_in_flight_defers_first_cycle() -> None:
    coordinator = FakeCoordinator(block=True)
    scheduler = CellScheduler(coordinator, interval=60)  # type: ignore[arg-type]

    scheduler.start()
    await _wait_for(lambda: coordinator.calls == 1)
    scheduler.stop()
    scheduler.start()
    await asyncio.sleep(0.02)
    assert coordinator.calls == 1

    coordinator.release.set()
    await _wait_for(lambda: coordinator.calls == 2)
    assert coordinator.max_active == 1

    scheduler.stop()
    coordinator.release.set()
    await scheduler.wait_idle()


@pytest.mark.asyncio
async def test_start_is_idempotent_while_running() -> None:
    coordinator = FakeCoordinator()
    scheduler = CellScheduler(coordinator, interval=60)  # type: ignore[arg-type]

    scheduler.start()
    scheduler.start()
    await _wait_for(lambda: scheduler.cycles_completed == 1)
    await asyncio.sleep(0.02)

    assert coordinator.calls == 1
    scheduler.stop()


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        CellScheduler(FakeCoordinator(), interval=0)  # type: ignore[arg-type]
