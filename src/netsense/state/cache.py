"""Volatile, newest-first cache of canonical records.

Holds everything acquired from the primary provider since the last
clear, until an export copies it into the durable store.  Contents are
lost on process exit.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable

from netsense.models.cell import CanonicalCellRecord

_logger = logging.getLogger(__name__)

CacheListener = Callable[[list[CanonicalCellRecord]], None]


class VolatileCellCache:
    """Thread-safe in-memory record list, most recent first.

    Every operation holds the same lock, and readers always get a copy,
    so a reader never observes a half-applied ``add`` or ``clear``.
    Listeners registered with :meth:`subscribe` receive a snapshot after
    each mutation; :attr:`version` lets pollers detect changes cheaply.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[CanonicalCellRecord] = []
        self._version = 0
        self._listeners: list[CacheListener] = []
        self._notify_lock = threading.RLock()

    def add(self, record: CanonicalCellRecord) -> None:
        """Insert *record* at the head of the cache."""
        with self._lock:
            self._records.insert(0, record)
            self._version += 1
        self._notify()

    def add_all(self, records: Iterable[CanonicalCellRecord]) -> int:
        """Insert *records* in order, as repeated :meth:`add` calls would.

        The last record ends up at the head.  Returns the number added.
        """
        incoming = list(records)
        if not incoming:
            return 0
        with self._lock:
            self._records[:0] = reversed(incoming)
            self._version += 1
        self._notify()
        return len(incoming)

    def get_all(self) -> list[CanonicalCellRecord]:
        """Return an independent copy of the cache, newest first."""
        with self._lock:
            return list(self._records)

    def clear(self) -> None:
        """Empty the cache.  The durable store is not touched."""
        with self._lock:
            self._records.clear()
            self._version += 1
        self._notify()

    def size(self) -> int:
        with self._lock:
            return len(self._records)

    def is_empty(self) -> bool:
        with self._lock:
            return not self._records

    def __len__(self) -> int:
        return self.size()

    @property
    def version(self) -> int:
        """Counter bumped by every mutation."""
        with self._lock:
            return self._version

    def subscribe(self, listener: CacheListener) -> Callable[[], None]:
        """Register *listener* for post-mutation snapshots; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        # Serialized; each delivery carries the state at delivery time.
        with self._notify_lock:
            with self._lock:
                if not self._listeners:
                    return
                listeners = list(self._listeners)
                snapshot = list(self._records)
            for listener in listeners:
                try:
                    listener(list(snapshot))
                except Exception:
                    _logger.warning("Cache listener %r failed", listener, exc_info=True)
