"""Measurement providers.

The primary provider aggregates rich per-technology measurements; the
fallback provider wraps the native telephony API and is consulted only
when the primary one returns nothing.
"""

from netsense.providers._base import DeviceStateProvider, FallbackCellProvider, PrimaryCellProvider
from netsense.providers.blocking import BlockingProviderAdapter
from netsense.providers.bridge import BridgeCellProvider

__all__ = [
    "BlockingProviderAdapter",
    "BridgeCellProvider",
    "DeviceStateProvider",
    "FallbackCellProvider",
    "PrimaryCellProvider",
]
