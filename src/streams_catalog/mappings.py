"""Service to cluster assignments within a namespace."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .errors import BadRequest, NamespaceNotFound
from .model import Namespace, NamespaceServiceClusterMapping
from .store import MAPPING, NAMESPACE, Store

LOG = logging.getLogger(__name__)


class MappingCatalog:
    """Owns the ``(namespace, service, cluster)`` mapping set.

    Every operation is scoped to a namespace and raises
    :class:`NamespaceNotFound` when that namespace does not exist.
    """

    def __init__(self, store: Store) -> None:
        self._store = store

    def _resolve(self, namespace_id: int) -> Namespace:
        namespace = self._store.get(NAMESPACE, namespace_id)
        if namespace is None:
            raise NamespaceNotFound(namespace_id)
        return namespace

    def _mappings_of(self, namespace_id: int) -> List[NamespaceServiceClusterMapping]:
        return sorted(
            (m for m in self._store.list(MAPPING) if m.namespace_id == namespace_id),
            key=lambda m: (m.service_name, m.cluster_id),
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def list_all(self, namespace_id: int) -> List[NamespaceServiceClusterMapping]:
        self._resolve(namespace_id)
        return self._mappings_of(namespace_id)

    def list_by_service(
        self, namespace_id: int, service_name: str
    ) -> List[NamespaceServiceClusterMapping]:
        self._resolve(namespace_id)
        return [m for m in self._mappings_of(namespace_id) if m.service_name == service_name]

    # ------------------------------------------------------------------
    # Single mapping mutations
    # ------------------------------------------------------------------
    def upsert_one(
        self, mapping: NamespaceServiceClusterMapping
    ) -> NamespaceServiceClusterMapping:
        self._resolve(mapping.namespace_id)
        self._store.put(MAPPING, mapping.key, mapping)
        LOG.debug("Mapped service %s to cluster %s in namespace %s",
                  mapping.service_name, mapping.cluster_id, mapping.namespace_id)
        return mapping

    def remove_one(
        self, namespace_id: int, service_name: str, cluster_id: int
    ) -> Optional[NamespaceServiceClusterMapping]:
        self._resolve(namespace_id)
        removed = self._store.delete(MAPPING, (namespace_id, service_name, cluster_id))
        if removed is not None:
            LOG.debug("Unmapped service %s from cluster %s in namespace %s",
                      service_name, cluster_id, namespace_id)
        return removed

    # ------------------------------------------------------------------
    # Bulk mutations
    # ------------------------------------------------------------------
    def remove_all(self, namespace_id: int) -> List[NamespaceServiceClusterMapping]:
        """Remove every mapping of ``namespace_id`` and return what was removed."""

        with self._store.transaction():
            self._resolve(namespace_id)
            removed = self._remove_existing(namespace_id)

        LOG.info("Removed %d mappings from namespace %s", len(removed), namespace_id)
        return removed

    def replace_all(
        self,
        namespace_id: int,
        new_mappings: Iterable[NamespaceServiceClusterMapping],
    ) -> List[NamespaceServiceClusterMapping]:
        """Replace the mapping set of ``namespace_id`` with ``new_mappings``.

        All existing mappings are removed before any new one is written.  The
        sequence runs inside a store transaction, so stores with rollback
        support leave the previous set intact if a step fails.
        """

        new_mappings = list(new_mappings)
        foreign = [m for m in new_mappings if m.namespace_id != namespace_id]
        if foreign:
            raise BadRequest(
                f"mappings for namespace {namespace_id} reference other namespaces: "
                f"{sorted({m.namespace_id for m in foreign})}"
            )

        with self._store.transaction():
            self._resolve(namespace_id)
            removed = self._remove_existing(namespace_id)
            created = [self._store.put(MAPPING, m.key, m) for m in new_mappings]

        LOG.info(
            "Replaced mappings of namespace %s: removed %d, wrote %d",
            namespace_id,
            len(removed),
            len(created),
        )
        return created

    def _remove_existing(self, namespace_id: int) -> List[NamespaceServiceClusterMapping]:
        removed = []
        for mapping in self._mappings_of(namespace_id):
            if self._store.delete(MAPPING, mapping.key) is not None:
                removed.append(mapping)
        return removed
