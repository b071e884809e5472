"""netsense - Async radio-cell measurement monitor."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("netsense")
except PackageNotFoundError:
    __version__ = "0+local"
from netsense.config import NetsenseConfig
from netsense.exceptions import (
    CellPermissionError,
    MalformedRecordError,
    NetsenseConfigError,
    NetsenseError,
    StoreError,
    TransientProviderError,
)
from netsense.export import ExportResult, delete_all, export_cache, render_csv
from netsense.ingestion.acquire import AcquisitionCoordinator
from netsense.ingestion.categorize import categorize, group_by_acquisition_time
from netsense.ingestion.cells import normalize, normalize_measurement
from netsense.models import (
    CanonicalCellRecord,
    CategorizedBatch,
    ConnectionRole,
    DeviceState,
    EmptyResultCondition,
    GroupedRow,
    RadioTechnology,
    SimpleFallbackRecord,
)
from netsense.monitor import CellMonitor
from netsense.scheduler import CellScheduler, SchedulerState
from netsense.state.cache import VolatileCellCache
from netsense.state.store import DurableCellStore, SqliteCellStore

__all__ = [
    "__version__",
    "AcquisitionCoordinator",
    "CanonicalCellRecord",
    "CategorizedBatch",
    "CellMonitor",
    "CellPermissionError",
    "CellScheduler",
    "ConnectionRole",
    "DeviceState",
    "DurableCellStore",
    "EmptyResultCondition",
    "ExportResult",
    "GroupedRow",
    "MalformedRecordError",
    "NetsenseConfig",
    "NetsenseConfigError",
    "NetsenseError",
    "RadioTechnology",
    "SchedulerState",
    "SimpleFallbackRecord",
    "SqliteCellStore",
    "StoreError",
    "TransientProviderError",
    "VolatileCellCache",
    "categorize",
    "delete_all",
    "export_cache",
    "group_by_acquisition_time",
    "normalize",
    "normalize_measurement",
    "render_csv",
]
