"""HTTP provider backed by the on-device telephony bridge."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any

import aiohttp
from pydantic import ValidationError

from netsense._constants import USER_AGENT
from netsense.config import NetsenseConfig
from netsense.exceptions import CellPermissionError, NetsenseError, TransientProviderError
from netsense.models.device import DeviceState

_logger = logging.getLogger(__name__)

CELLS_ENDPOINT = "/cells"
CELL_INFO_ENDPOINT = "/cell-info"
DEVICE_STATE_ENDPOINT = "/device-state"

_PERMISSION_STATUSES = frozenset({401, 403})


def _unwrap_list(body: Any, key: str, endpoint: str) -> list[dict[str, Any]]:
    """Accept either a bare JSON list or ``{"<key>": [...]}``."""
    items = body.get(key) if isinstance(body, dict) else body
    if items is None:
        return []
    if not isinstance(items, list):
        raise TransientProviderError(f"Expected a list of cells from {endpoint}", endpoint=endpoint)
    return [item for item in items if isinstance(item, Mapping)]


class BridgeCellProvider:
    """Primary, fallback and device-state provider over HTTP.

    The bridge answers ``401``/``403`` when the app lacks location or
    phone-state authorization; the primary endpoint turns that into
    :class:`CellPermissionError`.
    """

    def __init__(self, config: NetsenseConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def _get_json(self, endpoint: str) -> Any:
        url = f"{self._config.bridge_url.rstrip('/')}{endpoint}"
        headers = {"accept": "application/json", "user-agent": USER_AGENT}

        _logger.debug("GET %s", url)

        try:
            async with self._http.get(url, headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                if resp.status in _PERMISSION_STATUSES:
                    raise CellPermissionError(f"HTTP {resp.status} from {endpoint}: {text[:200]}")
                if resp.status != 200:
                    raise TransientProviderError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except NetsenseError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise TransientProviderError(f"Request to {endpoint} failed: {exc}", endpoint=endpoint) from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise TransientProviderError(f"Invalid JSON from {endpoint}: {text[:200]}", endpoint=endpoint) from exc

    async def get_cells(self) -> list[dict[str, Any]]:
        body = await self._get_json(CELLS_ENDPOINT)
        return _unwrap_list(body, "cells", CELLS_ENDPOINT)

    async def get_all_cell_info(self) -> list[dict[str, Any]] | None:
        try:
            body = await self._get_json(CELL_INFO_ENDPOINT)
            return _unwrap_list(body, "cellInfo", CELL_INFO_ENDPOINT)
        except NetsenseError as exc:
            _logger.warning("Native cell info unavailable: %s", exc)
            return None

    async def get_device_state(self) -> DeviceState | None:
        try:
            body = await self._get_json(DEVICE_STATE_ENDPOINT)
            return DeviceState.model_validate(body)
        except (NetsenseError, ValidationError) as exc:
            _logger.debug("Device state unavailable: %s", exc)
            return None
