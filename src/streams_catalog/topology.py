"""Read-only view of the topology subsystem."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Sequence

from .model import Topology
from .store import TOPOLOGY, Store


class TopologyLookup(ABC):
    """Source of the topologies that may reference a namespace."""

    @abstractmethod
    def list_topologies(self) -> Sequence[Topology]:
        """Return every deployed topology."""

    def referencing(self, namespace_id: int) -> List[Topology]:
        return [t for t in self.list_topologies() if t.namespace_id == namespace_id]


class StoreTopologyLookup(TopologyLookup):
    """Read topologies from the ``topology`` table of a :class:`Store`."""

    def __init__(self, store: Store) -> None:
        self._store = store

    def list_topologies(self) -> Sequence[Topology]:
        return self._store.list(TOPOLOGY)


class StaticTopologyLookup(TopologyLookup):
    """Fixed list of topologies, handy for embedding and tests."""

    def __init__(self, topologies: Sequence[Topology] = ()) -> None:
        self._topologies = list(topologies)

    def list_topologies(self) -> Sequence[Topology]:
        return list(self._topologies)
