"""Dual-source acquisition: primary provider first, native fallback second.

Only primary-source canonical records reach the volatile cache.  Fallback
records lack fields the durable schema needs, so they are shown to the
caller but never cached or exported.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from netsense.exceptions import CellPermissionError
from netsense.ingestion.categorize import categorize
from netsense.ingestion.cells import normalize_measurement
from netsense.ingestion.fallback import to_fallback_records
from netsense.models.batch import CategorizedBatch
from netsense.models.device import DeviceState, EmptyResultCondition, diagnose_empty_result
from netsense.providers._base import DeviceStateProvider, FallbackCellProvider, PrimaryCellProvider, RawPayload
from netsense.state.cache import VolatileCellCache

_logger = logging.getLogger(__name__)


class AcquisitionCoordinator:
    """Run one acquisition cycle against the configured providers.

    Parameters
    ----------
    primary
        Aggregating provider; its records are normalized and cached.
    fallback
        Native provider queried once when the primary returns nothing.
    cache
        Volatile cache receiving primary-source records.
    device_state
        Consulted only when both providers come back empty.  When omitted
        and *fallback* also implements ``get_device_state`` it is used.
    fallback_enabled
        Skip the fallback provider entirely when ``False``.
    """

    def __init__(
        self,
        primary: PrimaryCellProvider,
        *,
        cache: VolatileCellCache,
        fallback: FallbackCellProvider | None = None,
        device_state: DeviceStateProvider | None = None,
        fallback_enabled: bool = True,
    ) -> None:
        self._primary = primary
        self._fallback = fallback
        self._cache = cache
        if device_state is None and isinstance(fallback, DeviceStateProvider):
            device_state = fallback
        self._device_state = device_state
        self._fallback_enabled = fallback_enabled

    @property
    def cache(self) -> VolatileCellCache:
        return self._cache

    async def acquire_cycle(self) -> CategorizedBatch:
        """Acquire, normalize and categorize one set of measurements.

        Raises
        ------
        CellPermissionError
            The primary provider reported missing or revoked authorization.
            No fallback is attempted.
        """
        raws = await self._fetch_primary()
        if raws:
            records = [normalize_measurement(raw) for raw in raws]
            self._cache.add_all(records)
            _logger.debug("Acquired %d primary record(s)", len(records))
            return categorize(records)

        native = await self._fetch_fallback()
        fallback_records = to_fallback_records(native)
        if fallback_records:
            _logger.debug("Primary empty; showing %d fallback record(s)", len(fallback_records))
            return CategorizedBatch(fallback=fallback_records)

        condition = await self._diagnose()
        _logger.warning("No cell measurements from either provider (%s)", condition.value)
        return CategorizedBatch(diagnostic=condition)

    async def _fetch_primary(self) -> Sequence[RawPayload]:
        try:
            raws = await self._primary.get_cells()
        except PermissionError as exc:
            _logger.error("Cell measurements not authorized", exc_info=True)
            if isinstance(exc, CellPermissionError):
                raise
            raise CellPermissionError(str(exc) or "Cell measurements not authorized") from exc
        except Exception:
            _logger.warning("Primary provider failed; treating as empty", exc_info=True)
            return []
        return list(raws or [])

    async def _fetch_fallback(self) -> Sequence[Mapping[str, Any]]:
        if self._fallback is None or not self._fallback_enabled:
            return []
        try:
            native = await self._fallback.get_all_cell_info()
        except Exception:
            _logger.warning("Fallback provider failed; treating as empty", exc_info=True)
            return []
        return list(native or [])

    async def _diagnose(self) -> EmptyResultCondition:
        state: DeviceState | None = None
        if self._device_state is not None:
            try:
                state = await self._device_state.get_device_state()
            except Exception:
                _logger.warning("Device state query failed", exc_info=True)
        return diagnose_empty_result(state)
