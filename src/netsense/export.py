"""Export of the volatile cache to the durable store and CSV."""

from __future__ import annotations

import csv
import dataclasses
import io
import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TypeVar

from netsense._constants import MAX_NEIGHBORING_CELLS, NOT_AVAILABLE, csv_header
from netsense.exceptions import StoreError
from netsense.ingestion.categorize import group_by_acquisition_time
from netsense.models.batch import GroupedRow
from netsense.models.cell import CanonicalCellRecord
from netsense.state.cache import VolatileCellCache
from netsense.state.store import DurableCellStore

_logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclasses.dataclass(frozen=True)
class ExportResult:
    """Outcome of :func:`export_cache`."""

    count: int
    csv_text: str = ""
    path: Path | None = None


def _metric(value: str) -> str:
    return value or NOT_AVAILABLE


def _serving_columns(cell: CanonicalCellRecord) -> list[str]:
    return [
        cell.acquired_at,
        cell.technology.display_name,
        cell.role.value,
        cell.frequency_label or "",
        cell.bandwidth_label or "",
        cell.mcc or "",
        cell.mnc or "",
        cell.iso_country or "",
        cell.eci or "",
        cell.enb or "",
        cell.cid or "",
        cell.tac or "",
        cell.pci or "",
        _metric(cell.consolidated_rsrp),
        _metric(cell.consolidated_rsrq),
        _metric(cell.consolidated_sinr),
    ]


def _neighbor_columns(cell: CanonicalCellRecord | None) -> list[str]:
    if cell is None:
        return [NOT_AVAILABLE] * 5
    return [
        _metric(cell.consolidated_rsrp),
        cell.pci or "",
        _metric(cell.consolidated_rsrq),
        _metric(cell.consolidated_sinr),
        cell.frequency_label or "",
    ]


def row_values(row: GroupedRow, *, max_neighbors: int = MAX_NEIGHBORING_CELLS) -> list[str]:
    """Flatten one grouped row into CSV cells, padding missing neighbours."""
    values = _serving_columns(row.serving)
    for index in range(max_neighbors):
        neighbor = row.neighbors[index] if index < len(row.neighbors) else None
        values.extend(_neighbor_columns(neighbor))
    return values


def render_csv(records: Sequence[CanonicalCellRecord]) -> str:
    """Render *records* as CSV, one row per serving cell with its neighbours."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(csv_header())
    for row in group_by_acquisition_time(records):
        writer.writerow(row_values(row))
    return buffer.getvalue()


def _store_call(operation: str, fn: Callable[[], T]) -> T:
    try:
        return fn()
    except StoreError:
        raise
    except Exception as exc:
        raise StoreError(f"Durable store {operation} failed: {exc}") from exc


def export_cache(
    cache: VolatileCellCache,
    store: DurableCellStore,
    path: str | Path | None = None,
) -> ExportResult:
    """Persist the cache contents and render them as CSV.

    An empty cache exports nothing and leaves the store untouched.  The
    cache itself is never modified, even when the store fails.

    Raises
    ------
    StoreError
        The durable store rejected the insert.
    OSError
        *path* could not be written.
    """
    records = cache.get_all()
    if not records:
        _logger.info("Nothing to export")
        return ExportResult(count=0)

    _store_call("insert", lambda: store.insert_all(records))
    _logger.debug("Saved %d record(s) to the durable store", len(records))

    text = render_csv(records)
    target: Path | None = None
    if path is not None:
        target = Path(path)
        with target.open("w", encoding="utf-8", newline="") as fh:
            fh.write(text)
        _logger.info("Exported %d record(s) to %s", len(records), target)

    return ExportResult(count=len(records), csv_text=text, path=target)


def delete_all(cache: VolatileCellCache, store: DurableCellStore) -> None:
    """Clear the volatile cache, then delete everything from the store.

    Raises
    ------
    StoreError
        The durable store rejected the delete.  The cache is already clear.
    """
    cache.clear()
    _store_call("delete", store.delete_all)
    _logger.info("Deleted all cached and stored records")
