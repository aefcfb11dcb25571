"""In-process dictionary store."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from threading import RLock
from typing import Any, Dict, Hashable, Iterator, List, Optional

from .base import Store

LOG = logging.getLogger(__name__)


class MemoryStore(Store):
    """Thread-safe store keeping every table in a dictionary.

    :meth:`transaction` holds the store lock for its whole duration and
    restores a snapshot of all tables when the block raises, so a bulk
    operation either lands completely or not at all.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._tables: Dict[str, Dict[Hashable, Any]] = {}
        self._sequences: Dict[str, int] = {}
        self._depth = 0

    def _table(self, kind: str) -> Dict[Hashable, Any]:
        return self._tables.setdefault(kind, {})

    def get(self, kind: str, key: Hashable) -> Optional[Any]:
        with self._lock:
            return self._table(kind).get(key)

    def list(self, kind: str) -> List[Any]:
        with self._lock:
            return list(self._table(kind).values())

    def put(self, kind: str, key: Hashable, value: Any) -> Any:
        with self._lock:
            self._table(kind)[key] = value
            if isinstance(key, int) and key > self._sequences.get(kind, 0):
                self._sequences[kind] = key
            self._changed()
            return value

    def delete(self, kind: str, key: Hashable) -> Optional[Any]:
        with self._lock:
            removed = self._table(kind).pop(key, None)
            if removed is not None:
                self._changed()
            return removed

    def next_id(self, kind: str) -> int:
        with self._lock:
            self._sequences[kind] = self._sequences.get(kind, 0) + 1
            return self._sequences[kind]

    @contextmanager
    def transaction(self) -> Iterator["MemoryStore"]:
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            snapshot = {kind: dict(rows) for kind, rows in self._tables.items()}
            sequences = dict(self._sequences)
            self._depth = 1
            try:
                yield self
            except BaseException:
                LOG.debug("rolling back store transaction")
                self._tables = snapshot
                self._sequences = sequences
                raise
            finally:
                self._depth = 0
            self._committed()

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def _changed(self) -> None:
        """Hook invoked after every successful mutation."""

    def _committed(self) -> None:
        """Hook invoked when the outermost transaction completes."""
