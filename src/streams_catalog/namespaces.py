"""Namespace lifecycle: add, upsert, lookup and guarded removal."""

from __future__ import annotations

import logging
from threading import Lock
from typing import List, Optional

from .errors import AlreadyExists, ReferencedByTopology
from .model import Namespace
from .query import NamespaceQuery
from .store import MAPPING, NAMESPACE, Store
from .topology import TopologyLookup

LOG = logging.getLogger(__name__)


class NamespaceCatalog:
    """Owns namespace identity and name uniqueness.

    Parameters
    ----------
    store:
        Backing key/value store.
    topologies:
        Consulted before a namespace is removed; a namespace referenced by
        any topology cannot be deleted.
    enforce_unique_name_on_upsert:
        ``upsert`` historically replaces the namespace at an id without
        checking whether another namespace already uses the name.  The
        default keeps that behaviour (and logs a warning when it happens);
        setting this flag rejects the upsert with ``AlreadyExists`` instead.
    """

    def __init__(
        self,
        store: Store,
        topologies: TopologyLookup,
        *,
        enforce_unique_name_on_upsert: bool = False,
    ) -> None:
        self._store = store
        self._topologies = topologies
        self._enforce_unique_name_on_upsert = enforce_unique_name_on_upsert
        self._writer_lock = Lock()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def list(self, query: Optional[NamespaceQuery] = None) -> List[Namespace]:
        namespaces = sorted(self._store.list(NAMESPACE), key=lambda ns: ns.id)
        if query is None or query.is_empty():
            return namespaces
        matched = [ns for ns in namespaces if query.matches(ns)]
        LOG.debug("namespace query %s matched %d entries", query.describe(), len(matched))
        return matched

    def get_by_id(self, namespace_id: int) -> Optional[Namespace]:
        return self._store.get(NAMESPACE, namespace_id)

    def get_by_name(self, name: str) -> Optional[Namespace]:
        return next(
            (ns for ns in self._store.list(NAMESPACE) if ns.name == name), None
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def add(self, namespace: Namespace) -> Namespace:
        """Persist ``namespace`` under a fresh id.

        Raises :class:`AlreadyExists` if the name is taken.
        """

        with self._writer_lock:
            if self.get_by_name(namespace.name) is not None:
                raise AlreadyExists(namespace.name)
            created = namespace.with_id(self._store.next_id(NAMESPACE))
            self._store.put(NAMESPACE, created.id, created)

        LOG.info("Added namespace '%s' with id %s", created.name, created.id)
        return created

    def upsert(self, namespace_id: int, namespace: Namespace) -> Namespace:
        """Create or replace the namespace stored at ``namespace_id``."""

        stored = namespace.with_id(namespace_id)
        with self._writer_lock:
            clash = self.get_by_name(stored.name)
            if clash is not None and clash.id != namespace_id:
                if self._enforce_unique_name_on_upsert:
                    raise AlreadyExists(stored.name)
                LOG.warning(
                    "Upsert of namespace id %s reuses name '%s' already held by id %s",
                    namespace_id,
                    stored.name,
                    clash.id,
                )
            self._store.put(NAMESPACE, namespace_id, stored)

        LOG.info("Upserted namespace '%s' at id %s", stored.name, namespace_id)
        return stored

    def remove(self, namespace_id: int) -> Optional[Namespace]:
        """Delete the namespace unless a topology still refers to it.

        The namespace and its service to cluster mappings are deleted in one
        store transaction.  Returns the removed namespace, or ``None`` if
        there was none.
        """

        self.assert_not_referenced(namespace_id)

        with self._store.transaction():
            removed = self._store.delete(NAMESPACE, namespace_id)
            orphaned = [
                m for m in self._store.list(MAPPING) if m.namespace_id == namespace_id
            ]
            for mapping in orphaned:
                self._store.delete(MAPPING, mapping.key)

        if removed is None:
            LOG.debug("remove called for unknown namespace id %s", namespace_id)
        else:
            LOG.info(
                "Removed namespace '%s' (id %s) and %d mappings",
                removed.name,
                namespace_id,
                len(orphaned),
            )
        return removed

    def assert_not_referenced(self, namespace_id: int) -> None:
        referencing = self._topologies.referencing(namespace_id)
        if referencing:
            raise ReferencedByTopology(namespace_id, [t.id for t in referencing])
