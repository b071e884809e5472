"""Durable record store.

Only the export and delete operations write here.  Records are stored in
their canonical shape, one column per field, and are never updated
after insertion.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from netsense.exceptions import StoreError
from netsense.models.cell import SIGNAL_FIELDS, CanonicalCellRecord

_logger = logging.getLogger(__name__)

_COLUMNS: tuple[str, ...] = tuple(CanonicalCellRecord.model_fields)


def _column_type(name: str) -> str:
    if name == "signal_bucket":
        return "INTEGER"
    if name in SIGNAL_FIELDS:
        return "REAL"
    return "TEXT"


_CREATE_TABLE = (
    "CREATE TABLE IF NOT EXISTS cell_info (id INTEGER PRIMARY KEY AUTOINCREMENT, "
    + ", ".join(f"{name} {_column_type(name)}" for name in _COLUMNS)
    + ")"
)
_INSERT = f"INSERT INTO cell_info ({', '.join(_COLUMNS)}) VALUES ({', '.join('?' for _ in _COLUMNS)})"
_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM cell_info"


class DurableCellStore(Protocol):
    """Structural interface of the durable store used by export/delete."""

    def insert_all(self, records: Sequence[CanonicalCellRecord]) -> None: ...

    def query_all(self) -> list[CanonicalCellRecord]: ...

    def delete_all(self) -> None: ...


def _to_row(record: CanonicalCellRecord) -> tuple[Any, ...]:
    dumped = record.model_dump(mode="json")
    return tuple(dumped[name] for name in _COLUMNS)


def _from_row(row: sqlite3.Row) -> CanonicalCellRecord:
    return CanonicalCellRecord.model_validate({name: row[name] for name in _COLUMNS})


class SqliteCellStore:
    """sqlite3-backed :class:`DurableCellStore`.

    Usage::

        with SqliteCellStore("netsense.sqlite3") as store:
            store.insert_all(records)
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = str(db_path)
        self._lock = threading.RLock()
        self._conn: sqlite3.Connection | None = None

    def open(self) -> None:
        with self._lock:
            if self._conn is not None:
                return
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            try:
                conn = sqlite3.connect(self.db_path, check_same_thread=False)
                conn.row_factory = sqlite3.Row
                with conn:
                    conn.execute(_CREATE_TABLE)
            except sqlite3.Error as exc:
                raise StoreError(f"Cannot open cell store at {self.db_path}: {exc}") from exc
            self._conn = conn
            _logger.debug("Cell store opened at %s", self.db_path)

    def close(self) -> None:
        with self._lock:
            conn = self._conn
            self._conn = None
            if conn is not None:
                conn.close()

    def __enter__(self) -> SqliteCellStore:
        self.open()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self.open()
        assert self._conn is not None  # noqa: S101
        return self._conn

    def insert_all(self, records: Sequence[CanonicalCellRecord]) -> None:
        """Insert *records* in a single transaction."""
        rows = [_to_row(record) for record in records]
        with self._lock:
            conn = self._require_conn()
            try:
                with conn:
                    conn.executemany(_INSERT, rows)
            except sqlite3.Error as exc:
                raise StoreError(f"Insert of {len(rows)} record(s) failed: {exc}") from exc
        _logger.debug("Stored %d record(s)", len(rows))

    def query_all(self) -> list[CanonicalCellRecord]:
        """Return every stored record, most recently inserted first."""
        return self._query(f"{_SELECT} ORDER BY id DESC")

    def query_by_mcc(self, mcc: str) -> list[CanonicalCellRecord]:
        return self._query(f"{_SELECT} WHERE mcc = ? ORDER BY id DESC", (mcc,))

    def _query(self, sql: str, params: tuple[Any, ...] = ()) -> list[CanonicalCellRecord]:
        with self._lock:
            conn = self._require_conn()
            try:
                rows = conn.execute(sql, params).fetchall()
            except sqlite3.Error as exc:
                raise StoreError(f"Query failed: {exc}") from exc
        return [_from_row(row) for row in rows]

    def delete_all(self) -> None:
        with self._lock:
            conn = self._require_conn()
            try:
                with conn:
                    conn.execute("DELETE FROM cell_info")
            except sqlite3.Error as exc:
                raise StoreError(f"Delete failed: {exc}") from exc
        _logger.debug("Cell store cleared")
