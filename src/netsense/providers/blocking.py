"""Adapter for providers with a blocking, synchronous API."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from netsense.models.device import DeviceState
from netsense.providers._base import RawPayload


class BlockingProviderAdapter:
    """Expose blocking callables through the async provider protocols.

    Each call runs in a worker thread so a slow device query never stalls
    the event loop driving the scheduler.  Any callable left as ``None``
    behaves as a provider that returns nothing.
    """

    def __init__(
        self,
        *,
        get_cells: Callable[[], Sequence[RawPayload]] | None = None,
        get_all_cell_info: Callable[[], Sequence[Mapping[str, Any]] | None] | None = None,
        get_device_state: Callable[[], DeviceState | None] | None = None,
    ) -> None:
        self._get_cells = get_cells
        self._get_all_cell_info = get_all_cell_info
        self._get_device_state = get_device_state

    async def get_cells(self) -> list[RawPayload]:
        if self._get_cells is None:
            return []
        return list(await asyncio.to_thread(self._get_cells))

    async def get_all_cell_info(self) -> Sequence[Mapping[str, Any]] | None:
        if self._get_all_cell_info is None:
            return None
        return await asyncio.to_thread(self._get_all_cell_info)

    async def get_device_state(self) -> DeviceState | None:
        if self._get_device_state is None:
            return None
        return await asyncio.to_thread(self._get_device_state)
