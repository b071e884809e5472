from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass, field
from typing import Any

import aiohttp
import pytest

from netsense.config import NetsenseConfig
from netsense.exceptions import CellPermissionError, TransientProviderError
from netsense.models.device import DeviceState, SimState
from netsense.providers import BlockingProviderAdapter, BridgeCellProvider, DeviceStateProvider


@dataclass
class FakeResponse:
    status: int
    body: str

    async def text(self) -> str:
        return self.body


class _RequestContext:
    def __init__(self, outcome: FakeResponse | BaseException) -> None:
        self._outcome = outcome

    async def __aenter__(self) -> FakeResponse:
        if isinstance(self._outcome, BaseException):
            raise self._outcome
        return self._outcome

    async def __aexit__(self, *exc: Any) -> None:
        return None


@dataclass
class FakeHttpSession:
    routes: dict[str, FakeResponse | BaseException] = field(default_factory=dict)
    requested: list[tuple[str, dict[str, str]]] = field(default_factory=list)

    def get(self, url: str, *, headers: dict[str, str], timeout: aiohttp.ClientTimeout) -> _RequestContext:
        self.requested.append((url, headers))
        path = url.split("8765", 1)[1]
        return _RequestContext(self.routes[path])


def _ok(payload: Any) -> FakeResponse:
    return FakeResponse(200, json.dumps(payload))


def _provider(session: FakeHttpSession) -> BridgeCellProvider:
    config = NetsenseConfig(bridge_url="http://127.0.0.1:8765/")
    return BridgeCellProvider(config, session)  # type: ignore[arg-type]


# ------------------------------------------------------------------
# Bridge provider
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_get_cells_accepts_list_or_wrapped_list() -> None:
    session = FakeHttpSession({"/cells": _ok([{"technology": "LTE"}, "junk"])})
    assert await _provider(session).get_cells() == [{"technology": "LTE"}]

    session.routes["/cells"] = _ok({"cells": [{"technology": "NR"}]})
    assert await _provider(session).get_cells() == [{"technology": "NR"}]

    url, headers = session.requested[0]
    assert url == "http://127.0.0.1:8765/cells"
    assert headers["user-agent"].startswith("netsense/")


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403])
async def test_get_cells_maps_auth_failures_to_permission_error(status: int) -> None:
    session = FakeHttpSession({"/cells": FakeResponse(status, "missing ACCESS_FINE_LOCATION")})

    with pytest.raises(CellPermissionError):
        await _provider(session).get_cells()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "outcome",
    [
        FakeResponse(500, "oops"),
        FakeResponse(200, "{not json"),
        aiohttp.ClientConnectionError("refused"),
        asyncio.TimeoutError(),
    ],
)
async def test_get_cells_wraps_transient_failures(outcome: FakeResponse | BaseException) -> None:
    session = FakeHttpSession({"/cells": outcome})

    with pytest.raises(TransientProviderError) as excinfo:
        await _provider(session).get_cells()

    assert excinfo.value.endpoint == "/cells"


@pytest.mark.asyncio
async def test_non_list_payload_is_transient() -> None:
    session = FakeHttpSession({"/cells": _ok({"cells": "nope"})})

    with pytest.raises(TransientProviderError):
        await _provider(session).get_cells()


@pytest.mark.asyncio
async def test_fallback_returns_none_on_any_failure() -> None:
    session = FakeHttpSession({"/cell-info": FakeResponse(403, "denied")})
    assert await _provider(session).get_all_cell_info() is None

    session.routes["/cell-info"] = _ok({"cellInfo": [{"type": "CellInfoGsm"}]})
    assert await _provider(session).get_all_cell_info() == [{"type": "CellInfoGsm"}]


@pytest.mark.asyncio
async def test_device_state() -> None:
    session = FakeHttpSession(
        {"/device-state": _ok({"hasTelephony": True, "simState": 5, "airplaneMode": False, "networkOperator": "31026"})}
    )

    state = await _provider(session).get_device_state()

    assert state is not None
    assert state.sim_state is SimState.READY
    assert state.network_operator == "31026"

    session.routes["/device-state"] = FakeResponse(502, "bad gateway")
    assert await _provider(session).get_device_state() is None


def test_bridge_provider_exposes_device_state() -> None:
    assert isinstance(_provider(FakeHttpSession()), DeviceStateProvider)


# ------------------------------------------------------------------
# Blocking adapter
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_blocking_callables_run_off_the_event_loop() -> None:
    def slow_cells() -> list[dict[str, Any]]:
        time.sleep(0.05)
        return [{"technology": "GSM"}]

    adapter = BlockingProviderAdapter(
        get_cells=slow_cells,
        get_device_state=lambda: DeviceState(has_telephony=False),
    )

    ticks = 0

    async def ticker() -> None:
        nonlocal ticks
        while True:
            ticks += 1
            await asyncio.sleep(0.005)

    task = asyncio.create_task(ticker())
    try:
        cells = await adapter.get_cells()
    finally:
        task.cancel()

    assert cells == [{"technology": "GSM"}]
    assert ticks > 1
    state = await adapter.get_device_state()
    assert state is not None and state.has_telephony is False


@pytest.mark.asyncio
async def test_blocking_adapter_defaults_to_empty() -> None:
    adapter = BlockingProviderAdapter()

    assert await adapter.get_cells() == []
    assert await adapter.get_all_cell_info() is None
    assert await adapter.get_device_state() is None
