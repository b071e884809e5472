from __future__ import annotations

import csv
import io
from collections.abc import Iterator, Sequence
from pathlib import Path

import pytest

from netsense._constants import csv_header
from netsense.exceptions import StoreError
from netsense.export import delete_all, export_cache, render_csv
from netsense.models.cell import CanonicalCellRecord, ConnectionRole, RadioTechnology
from netsense.state.cache import VolatileCellCache
from netsense.state.store import SqliteCellStore


def _serving(acquired_at: str = "t1") -> CanonicalCellRecord:
    return CanonicalCellRecord(
        technology=RadioTechnology.LTE,
        role=ConnectionRole.SERVING,
        acquired_at=acquired_at,
        mcc="310",
        mnc="260",
        iso_country="us",
        eci="27447297",
        enb="107216",
        cid="1",
        tac="12345",
        pci="101",
        frequency_label="66486",
        bandwidth_label="20000",
        rsrp=-85,
        signal_bucket=3,
        consolidated_rsrp="-85",
    )


def _neighbor(pci: str, acquired_at: str = "t1") -> CanonicalCellRecord:
    return CanonicalCellRecord(
        technology=RadioTechnology.NR,
        role=ConnectionRole.NEIGHBORING,
        acquired_at=acquired_at,
        pci=pci,
        frequency_label="627264",
        bandwidth_label="N/A",
        ss_rsrp=-99,
        ss_rsrq=-11,
        consolidated_rsrp="-99",
        consolidated_rsrq="-11",
    )


class FailingStore:
    def insert_all(self, records: Sequence[CanonicalCellRecord]) -> None:
        raise RuntimeError("disk full")

    def query_all(self) -> list[CanonicalCellRecord]:
        return []

    def delete_all(self) -> None:
        raise StoreError("locked")


@pytest.fixture
def store(tmp_path: Path) -> Iterator[SqliteCellStore]:
    with SqliteCellStore(tmp_path / "cells.sqlite3") as cell_store:
        yield cell_store


# ------------------------------------------------------------------
# Durable store
# ------------------------------------------------------------------


def test_store_round_trips_records_newest_first(store: SqliteCellStore) -> None:
    first, second = _serving("t1"), _neighbor("7", "t2")

    store.insert_all([first])
    store.insert_all([second])

    assert store.query_all() == [second, first]


def test_store_query_by_mcc(store: SqliteCellStore) -> None:
    store.insert_all([_serving(), _neighbor("7")])

    assert [r.pci for r in store.query_by_mcc("310")] == ["101"]
    assert store.query_by_mcc("999") == []


def test_store_delete_all(store: SqliteCellStore) -> None:
    store.insert_all([_serving()])
    store.delete_all()

    assert store.query_all() == []


def test_store_persists_across_connections(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "cells.sqlite3"
    with SqliteCellStore(path) as store:
        store.insert_all([_serving()])

    with SqliteCellStore(path) as store:
        assert len(store.query_all()) == 1


# ------------------------------------------------------------------
# CSV
# ------------------------------------------------------------------


def test_csv_header() -> None:
    header = csv_header()

    assert header[:16] == [
        "Timestamp", "Net", "ConnectionStatus", "Frequency", "BandWidth", "MCC", "MNC", "ISO",
        "ECI", "eNb", "CID", "TAC", "PCI", "RSRP", "RSRQ", "SINR",
    ]
    assert header[16:21] == ["nc1_rsrp", "nc1_pci", "nc1_rsrq", "nc1_sinr", "nc1_freq"]
    assert header[-1] == "nc3_freq"
    assert len(header) == 31


def test_render_csv_rows() -> None:
    text = render_csv([_serving(), _neighbor("7")])
    rows = list(csv.reader(io.StringIO(text)))

    assert rows[0] == csv_header()
    assert len(rows) == 2
    row = rows[1]
    assert row[:16] == [
        "t1", "LTE", "Serving", "66486", "20000", "310", "260", "us",
        "27447297", "107216", "1", "12345", "101", "-85", "N/A", "N/A",
    ]
    assert row[16:21] == ["-99", "7", "-11", "N/A", "627264"]
    assert row[21:] == ["N/A"] * 10


# ------------------------------------------------------------------
# Export / delete
# ------------------------------------------------------------------


def test_export_writes_store_and_file(store: SqliteCellStore, tmp_path: Path) -> None:
    cache = VolatileCellCache()
    cache.add_all([_serving(), _neighbor("7")])
    target = tmp_path / "cell_data_export.csv"

    result = export_cache(cache, store, target)

    assert result.count == 2
    assert result.path == target
    assert target.read_text(encoding="utf-8") == result.csv_text
    assert len(store.query_all()) == 2
    assert cache.size() == 2


def test_export_of_empty_cache_leaves_store_untouched(store: SqliteCellStore, tmp_path: Path) -> None:
    store.insert_all([_serving()])

    result = export_cache(VolatileCellCache(), store, tmp_path / "out.csv")

    assert result.count == 0
    assert result.path is None
    assert not (tmp_path / "out.csv").exists()
    assert len(store.query_all()) == 1


def test_failing_store_reports_error_and_keeps_cache(tmp_path: Path) -> None:
    cache = VolatileCellCache()
    cache.add(_serving())
    before = cache.get_all()

    with pytest.raises(StoreError, match="disk full"):
        export_cache(cache, FailingStore(), tmp_path / "out.csv")

    assert cache.get_all() == before
    assert not (tmp_path / "out.csv").exists()


def test_delete_all_clears_cache_and_store(store: SqliteCellStore) -> None:
    cache = VolatileCellCache()
    cache.add(_serving())
    store.insert_all([_serving()])

    delete_all(cache, store)

    assert cache.is_empty()
    assert store.query_all() == []


def test_delete_all_reports_store_failure() -> None:
    cache = VolatileCellCache()
    cache.add(_serving())

    with pytest.raises(StoreError, match="locked"):
        delete_all(cache, FailingStore())
