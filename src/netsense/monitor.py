"""High-level async facade wiring providers, cache, store and scheduler."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import aiohttp

from netsense import export as _export
from netsense.config import NetsenseConfig
from netsense.exceptions import NetsenseError
from netsense.ingestion.acquire import AcquisitionCoordinator
from netsense.ingestion.categorize import group_by_acquisition_time
from netsense.models.batch import CategorizedBatch, GroupedRow
from netsense.providers._base import DeviceStateProvider, FallbackCellProvider, PrimaryCellProvider
from netsense.providers.bridge import BridgeCellProvider
from netsense.scheduler import BatchCallback, CellScheduler, SchedulerState, StoppedCallback
from netsense.state.cache import VolatileCellCache
from netsense.state.store import DurableCellStore, SqliteCellStore


class CellMonitor:
    """Async cell monitor.

    Usage::

        async with CellMonitor(config) as monitor:
            monitor.start()
            ...
            await monitor.export_csv()

    Without explicit providers, the monitor talks to the telephony bridge
    at ``config.bridge_url`` for primary, fallback and device-state data.
    """

    def __init__(
        self,
        config: NetsenseConfig | None = None,
        *,
        primary: PrimaryCellProvider | None = None,
        fallback: FallbackCellProvider | None = None,
        device_state: DeviceStateProvider | None = None,
        store: DurableCellStore | None = None,
        cache: VolatileCellCache | None = None,
        session: aiohttp.ClientSession | None = None,
        on_batch: BatchCallback | None = None,
        on_stopped: StoppedCallback | None = None,
    ) -> None:
        self._config = config or NetsenseConfig.from_env()
        self._primary = primary
        self._fallback = fallback
        self._device_state = device_state
        self._external_store = store is not None
        self._store = store
        self._cache = cache or VolatileCellCache()
        self._external_session = session is not None
        self._http_session = session
        self._on_batch = on_batch
        self._on_stopped = on_stopped
        self._scheduler: CellScheduler | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> CellMonitor:
        primary = self._primary
        fallback = self._fallback
        device_state = self._device_state
        if primary is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            bridge = BridgeCellProvider(self._config, self._http_session)
            primary = bridge
            fallback = fallback or bridge
            device_state = device_state or bridge

        if self._store is None:
            self._store = SqliteCellStore(self._config.database_path)

        coordinator = AcquisitionCoordinator(
            primary,
            cache=self._cache,
            fallback=fallback,
            device_state=device_state,
            fallback_enabled=self._config.fallback_enabled,
        )
        self._scheduler = CellScheduler(
            coordinator,
            interval=self._config.refresh_interval,
            on_batch=self._on_batch,
            on_stopped=self._on_stopped,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._scheduler is not None:
            self._scheduler.stop()
            await self._scheduler.wait_idle()
            self._scheduler = None
        if not self._external_store and isinstance(self._store, SqliteCellStore):
            self._store.close()
            self._store = None
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    def _require_scheduler(self) -> CellScheduler:
        if self._scheduler is None:
            raise NetsenseError("Monitor not initialized. Use 'async with CellMonitor(...) as monitor:'")
        return self._scheduler

    def _require_store(self) -> DurableCellStore:
        if self._store is None:
            raise NetsenseError("Monitor not initialized. Use 'async with CellMonitor(...) as monitor:'")
        return self._store

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def start(self) -> None:
        self._require_scheduler().start()

    def stop(self) -> None:
        self._require_scheduler().stop()

    async def wait_idle(self) -> None:
        await self._require_scheduler().wait_idle()

    @property
    def state(self) -> SchedulerState:
        if self._scheduler is None:
            return SchedulerState.STOPPED
        return self._scheduler.state

    @property
    def latest_batch(self) -> CategorizedBatch | None:
        if self._scheduler is None:
            return None
        return self._scheduler.latest_batch

    @property
    def cache(self) -> VolatileCellCache:
        return self._cache

    @property
    def store(self) -> DurableCellStore:
        return self._require_store()

    def grouped_rows(self) -> list[GroupedRow]:
        """Group the cached records for tabular display."""
        return group_by_acquisition_time(self._cache.get_all())

    # ------------------------------------------------------------------
    # Export / delete
    # ------------------------------------------------------------------

    async def export_csv(self, path: str | Path | None = None) -> _export.ExportResult:
        """Flush the cache into the durable store and write a CSV file.

        *path* defaults to ``config.export_path``.
        """
        store = self._require_store()
        target = path if path is not None else self._config.export_path
        return await asyncio.to_thread(_export.export_cache, self._cache, store, target)

    async def delete_all(self) -> None:
        """Clear both the volatile cache and the durable store."""
        store = self._require_store()
        await asyncio.to_thread(_export.delete_all, self._cache, store)
