"""Conversion of native-API measurements into fallback records.

The native path only exposes a handful of values per cell, so these
records stay in their reduced shape and are used for display only.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from netsense.ingestion.normalize import safe_int, safe_str
from netsense.models.cell import RadioTechnology, SimpleFallbackRecord

_logger = logging.getLogger(__name__)


def _technology_of(raw: Mapping[str, Any]) -> RadioTechnology:
    tag = raw.get("technology") or raw.get("type") or ""
    text = str(tag)
    # Native class names such as ``CellInfoLte``.
    if text.lower().startswith("cellinfo"):
        text = text[len("cellinfo") :]
    return RadioTechnology(text)


def _section(raw: Mapping[str, Any], *keys: str) -> Mapping[str, Any]:
    for key in keys:
        value = raw.get(key)
        if isinstance(value, Mapping):
            return value
    return {}


def to_fallback_record(raw: Mapping[str, Any]) -> SimpleFallbackRecord | None:
    """Map one native measurement to a :class:`SimpleFallbackRecord`.

    Returns ``None`` for cell types the native path does not support.
    """
    technology = _technology_of(raw)
    identity = _section(raw, "cellIdentity", "identity")
    strength = _section(raw, "cellSignalStrength", "signal")
    is_serving = bool(raw.get("registered") or raw.get("isRegistered"))
    rssi = safe_int(strength.get("dbm"))

    if technology is RadioTechnology.LTE:
        return SimpleFallbackRecord(
            technology=technology,
            is_serving=is_serving,
            rsrp=safe_int(strength.get("rsrp")),
            rsrq=safe_int(strength.get("rsrq")),
            rssi=rssi,
            sinr=safe_int(strength.get("rssnr")),
            pci=safe_int(identity.get("pci")),
            cell_id=safe_str(identity.get("ci")),
        )
    if technology is RadioTechnology.NR:
        # SS-RSRP and friends are not reliably exposed natively.
        return SimpleFallbackRecord(
            technology=technology,
            is_serving=is_serving,
            rssi=rssi,
            pci=safe_int(identity.get("pci")),
            cell_id=safe_str(identity.get("nci")),
        )
    if technology is RadioTechnology.GSM:
        return SimpleFallbackRecord(
            technology=technology,
            is_serving=is_serving,
            rssi=rssi,
            cell_id=safe_str(identity.get("cid")),
        )
    if technology is RadioTechnology.CDMA:
        base_station = safe_str(identity.get("basestationId"))
        network_id = safe_str(identity.get("networkId"))
        cell_id = None
        if base_station is not None or network_id is not None:
            cell_id = f"{base_station}-{network_id}"
        return SimpleFallbackRecord(technology=technology, is_serving=is_serving, rssi=rssi, cell_id=cell_id)
    if technology is RadioTechnology.WCDMA:
        return SimpleFallbackRecord(
            technology=technology,
            is_serving=is_serving,
            rssi=rssi,
            pci=safe_int(identity.get("psc")),
            cell_id=safe_str(identity.get("cid")),
        )

    _logger.debug("Unsupported native cell type: %s", raw.get("technology") or raw.get("type"))
    return None


def to_fallback_records(raws: Iterable[Mapping[str, Any]]) -> list[SimpleFallbackRecord]:
    records: list[SimpleFallbackRecord] = []
    for raw in raws:
        if not isinstance(raw, Mapping):
            _logger.debug("Skipping non-object native cell entry: %r", raw)
            continue
        record = to_fallback_record(raw)
        if record is not None:
            records.append(record)
    return records
