"""Data models for cell measurements."""

from netsense.models._base import CellBaseModel, CellEnum, is_sentinel
from netsense.models.batch import CategorizedBatch, GroupedRow
from netsense.models.cell import (
    CanonicalCellRecord,
    ConnectionRole,
    RadioTechnology,
    SimpleFallbackRecord,
)
from netsense.models.device import DeviceState, EmptyResultCondition, SimState, diagnose_empty_result
from netsense.models.raw import (
    BandInfo,
    NetworkInfo,
    RawCdmaCell,
    RawCellBase,
    RawGsmCell,
    RawLteCell,
    RawMeasurement,
    RawNrCell,
    RawTdscdmaCell,
    RawWcdmaCell,
    parse_raw_measurement,
)

__all__ = [
    "BandInfo",
    "CanonicalCellRecord",
    "CategorizedBatch",
    "CellBaseModel",
    "CellEnum",
    "ConnectionRole",
    "DeviceState",
    "EmptyResultCondition",
    "GroupedRow",
    "NetworkInfo",
    "RadioTechnology",
    "RawCdmaCell",
    "RawCellBase",
    "RawGsmCell",
    "RawLteCell",
    "RawMeasurement",
    "RawNrCell",
    "RawTdscdmaCell",
    "RawWcdmaCell",
    "SimState",
    "SimpleFallbackRecord",
    "diagnose_empty_result",
    "is_sentinel",
    "parse_raw_measurement",
]
