"""Structural provider interfaces.

Protocols keep the coordinator independent of where measurements come
from, and make it easy to pass test doubles.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from netsense.models.device import DeviceState
from netsense.models.raw import RawCellBase

RawPayload = RawCellBase | Mapping[str, Any]


class PrimaryCellProvider(Protocol):
    async def get_cells(self) -> Sequence[RawPayload]:
        """Return the current technology-tagged measurements.

        May raise :class:`PermissionError` when authorization is missing,
        or any other exception on internal failure.
        """
        ...


class FallbackCellProvider(Protocol):
    async def get_all_cell_info(self) -> Sequence[Mapping[str, Any]] | None:
        """Return native measurements, or ``None``/empty on failure."""
        ...


@runtime_checkable
class DeviceStateProvider(Protocol):
    async def get_device_state(self) -> DeviceState | None: ...
