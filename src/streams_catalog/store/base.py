"""Abstract interface for catalog stores."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Hashable, Iterator, List, Optional

NAMESPACE = "namespace"
MAPPING = "namespace_service_cluster_mapping"
TOPOLOGY = "topology"


class Store(ABC):
    """Simple get/list/put/delete-by-key storage used by the catalogs.

    ``kind`` selects a table; keys are hashable values (integer ids for
    namespaces and topologies, the mapping triple for mappings).
    """

    @abstractmethod
    def get(self, kind: str, key: Hashable) -> Optional[Any]:
        """Return the value stored under ``key`` or ``None``."""

    @abstractmethod
    def list(self, kind: str) -> List[Any]:
        """Return every value of ``kind``."""

    @abstractmethod
    def put(self, kind: str, key: Hashable, value: Any) -> Any:
        """Create or replace ``key`` and return the stored value."""

    @abstractmethod
    def delete(self, kind: str, key: Hashable) -> Optional[Any]:
        """Remove ``key`` and return the removed value, ``None`` if absent."""

    @abstractmethod
    def next_id(self, kind: str) -> int:
        """Reserve a fresh integer id for ``kind``."""

    @contextmanager
    def transaction(self) -> Iterator["Store"]:
        """Group several calls into one unit of work.

        The default implementation provides no isolation or rollback; stores
        that can do better override it.
        """

        yield self
