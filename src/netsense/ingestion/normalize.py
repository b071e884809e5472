"""Normalization helpers.

Centralizes defensive parsing, sentinel handling, and the derived
signal metrics shared by every technology.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Any

from netsense._constants import (
    LEGACY_LADDER,
    LTE_NR_LADDER,
    NOT_AVAILABLE,
    NR_BANDWIDTH_BY_ARFCN,
    UNKNOWN_BANDWIDTH,
)
from netsense.models._base import is_sentinel


def safe_float(value: Any) -> float | None:
    """Parse a provider number, or ``None`` for sentinels and garbage."""
    if is_sentinel(value):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    """Like :func:`safe_float`, truncated to ``int``."""
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_str(value: Any) -> str | None:
    """Stringify a provider value; sentinels and empty text become ``None``."""
    if is_sentinel(value):
        return None
    text = str(value)
    return text if text else None


def format_metric(value: float | None) -> str:
    """Render a dBm/dB value the way providers print it (``-85``, ``12.5``)."""
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _bucket(value: float | None, ladder: tuple[tuple[float, int], ...]) -> int:
    if value is None:
        return 0
    for lower_bound, bucket in ladder:
        if value >= lower_bound:
            return bucket
    return 0


def lte_nr_signal_bucket(power_dbm: float | None) -> int:
    """Quality bucket 0-4 for an LTE RSRP or NR SS-RSRP reading."""
    return _bucket(power_dbm, LTE_NR_LADDER)


def legacy_signal_bucket(power_dbm: float | None) -> int:
    """Quality bucket 0-4 for a CDMA/GSM/WCDMA/TDSCDMA RSSI reading."""
    return _bucket(power_dbm, LEGACY_LADDER)


def estimate_nr_bandwidth(downlink_arfcn: int | None) -> str:
    """Estimate the NR carrier bandwidth from its downlink NR-ARFCN."""
    if downlink_arfcn is None:
        return NOT_AVAILABLE
    for low, high, label in NR_BANDWIDTH_BY_ARFCN:
        if low <= downlink_arfcn <= high:
            return label
    return UNKNOWN_BANDWIDTH


def first_available(values: Iterable[float | None]) -> str:
    """Return the first non-empty value rendered as text, or ``""``."""
    for value in values:
        if value is not None:
            return format_metric(value)
    return ""


def consolidated_rsrp(
    rsrp: float | None,
    ss_rsrp: float | None,
    csi_rsrp: float | None,
    rssi: float | None,
) -> str:
    return first_available((rsrp, ss_rsrp, csi_rsrp, rssi))


def consolidated_rsrq(rsrq: float | None, ss_rsrq: float | None, csi_rsrq: float | None) -> str:
    return first_available((rsrq, ss_rsrq, csi_rsrq))


def consolidated_sinr(sinr: float | None, ss_sinr: float | None, csi_sinr: float | None) -> str:
    return first_available((sinr, ss_sinr, csi_sinr))


def band_label(name: str | None, number: int | None, channel: int | None, channel_kind: str) -> str | None:
    """Render ``"<band name or Band N> (<kind>: <channel>)"`` for legacy RATs."""
    if name is None and number is None and channel is None:
        return None
    prefix = name if name is not None else f"Band {number if number is not None else NOT_AVAILABLE}"
    suffix = channel if channel is not None else NOT_AVAILABLE
    return f"{prefix} ({channel_kind}: {suffix})"
