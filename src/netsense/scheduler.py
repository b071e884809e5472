"""Single-flight periodic driver for the acquisition coordinator."""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable

from netsense._constants import REFRESH_INTERVAL
from netsense.exceptions import CellPermissionError
from netsense.ingestion.acquire import AcquisitionCoordinator
from netsense.models.batch import CategorizedBatch

_logger = logging.getLogger(__name__)

BatchCallback = Callable[[CategorizedBatch], None]
StoppedCallback = Callable[[CellPermissionError | None], None]


class SchedulerState(enum.StrEnum):
    STOPPED = "Stopped"
    RUNNING = "Running"


class CellScheduler:
    """Run acquisition cycles back to back with a fixed pause between them.

    The next cycle is scheduled only once the current one has finished, so
    at most one cycle is ever in flight.  :meth:`stop` takes effect at once
    for scheduling: a cycle already running finishes, but its completion
    does not schedule another.  A :class:`CellPermissionError` stops the
    scheduler and is passed to ``on_stopped``.

    Must be driven from a running event loop.
    """

    def __init__(
        self,
        coordinator: AcquisitionCoordinator,
        *,
        interval: float = REFRESH_INTERVAL,
        on_batch: BatchCallback | None = None,
        on_stopped: StoppedCallback | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._coordinator = coordinator
        self._interval = interval
        self._on_batch = on_batch
        self._on_stopped = on_stopped
        self._state = SchedulerState.STOPPED
        self._generation = 0
        self._task: asyncio.Task[None] | None = None
        self._handle: asyncio.TimerHandle | None = None
        self._latest_batch: CategorizedBatch | None = None
        self._last_error: CellPermissionError | None = None
        self._cycles_completed = 0

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is SchedulerState.RUNNING

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def latest_batch(self) -> CategorizedBatch | None:
        return self._latest_batch

    @property
    def last_error(self) -> CellPermissionError | None:
        return self._last_error

    @property
    def cycles_completed(self) -> int:
        return self._cycles_completed

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Switch to ``Running`` and trigger one cycle immediately.

        If a cycle from a previous run is still in flight, the first cycle
        of this run starts as soon as that one completes.
        """
        if self._state is SchedulerState.RUNNING:
            return
        self._state = SchedulerState.RUNNING
        self._last_error = None
        self._generation += 1
        if self.in_flight:
            _logger.debug("Start requested while a cycle is in flight; deferring first cycle")
            return
        self._launch(self._generation)

    def stop(self) -> None:
        """Switch to ``Stopped`` and cancel any pending cycle."""
        if self._state is SchedulerState.STOPPED:
            return
        self._state = SchedulerState.STOPPED
        self._cancel_pending()
        self._notify_stopped(None)

    async def wait_idle(self) -> None:
        """Wait for the cycle currently in flight, if any."""
        task = self._task
        if task is not None and not task.done():
            await asyncio.wait({task})

    # ------------------------------------------------------------------
    # Cycle handling
    # ------------------------------------------------------------------

    def _cancel_pending(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _launch(self, generation: int) -> None:
        self._handle = None
        if self._state is not SchedulerState.RUNNING or generation != self._generation:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run_cycle(generation))

    async def _run_cycle(self, generation: int) -> None:
        try:
            batch = await self._coordinator.acquire_cycle()
        except CellPermissionError as exc:
            self._cycles_completed += 1
            self._task = None
            self._last_error = exc
            if self._state is SchedulerState.RUNNING:
                self._state = SchedulerState.STOPPED
                self._cancel_pending()
                _logger.error("Scheduler stopped: %s", exc)
                self._notify_stopped(exc)
            return
        except Exception:
            _logger.warning("Acquisition cycle failed", exc_info=True)
        else:
            self._latest_batch = batch
            if self._state is SchedulerState.RUNNING and generation == self._generation:
                self._deliver(batch)

        self._cycles_completed += 1
        self._task = None
        self._schedule_next(generation)

    def _schedule_next(self, finished_generation: int) -> None:
        if self._state is not SchedulerState.RUNNING:
            return
        if finished_generation != self._generation:
            # A restart happened while this cycle ran; its first cycle was deferred.
            self._launch(self._generation)
            return
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._interval, self._launch, self._generation)

    def _deliver(self, batch: CategorizedBatch) -> None:
        if self._on_batch is None:
            return
        try:
            self._on_batch(batch)
        except Exception:
            _logger.warning("on_batch callback failed", exc_info=True)

    def _notify_stopped(self, exc: CellPermissionError | None) -> None:
        if self._on_stopped is None:
            return
        try:
            self._on_stopped(exc)
        except Exception:
            _logger.warning("on_stopped callback failed", exc_info=True)
