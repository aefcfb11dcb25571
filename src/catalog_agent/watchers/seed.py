"""File-based seed watcher.

Polls a JSON document describing namespaces and their mappings and applies it
to the catalog::

    {"namespaces": [{"name": "prod", "streamingEngine": "STORM",
                     "mappings": [{"serviceName": "KAFKA", "clusterId": 1}]}]}

Namespaces are matched by name: new ones are added, changed ones upserted at
their existing id.  The mapping set of a namespace is bulk-replaced whenever
it differs from the document.  Namespaces missing from the document are left
alone.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from threading import Event, Thread
from typing import Dict, List, Sequence, Tuple

from streams_catalog import CatalogError, Namespace, NamespaceServiceClusterMapping
from streams_catalog.resource import NamespaceCatalogResource

LOG = logging.getLogger(__name__)

# (service name, cluster id)
Assignment = Tuple[str, int]


@dataclass(frozen=True)
class SeedEntry:
    namespace: Namespace
    assignments: Sequence[Assignment]


def _extract_state(payload: dict) -> Dict[str, SeedEntry]:
    entries = payload.get("namespaces")
    if entries is None:
        raise ValueError("seed file missing 'namespaces' key")

    state: Dict[str, SeedEntry] = {}
    for entry in entries:
        mappings = entry.get("mappings", [])
        namespace = Namespace.from_dict(
            {k: v for k, v in entry.items() if k not in ("mappings", "id")}
        )
        assignments = sorted(
            {
                (m.service_name, m.cluster_id)
                for m in (
                    NamespaceServiceClusterMapping.from_dict(raw, namespace_id=0)
                    for raw in mappings
                )
            }
        )
        state[namespace.name] = SeedEntry(namespace, assignments)
    return state


class SeedFileWatcher(Thread):
    """Poll a JSON seed file and reconcile the catalog against it."""

    def __init__(
        self,
        resource: NamespaceCatalogResource,
        path: Path,
        interval: float,
        stop_event: Event,
    ) -> None:
        super().__init__(daemon=True)
        self._namespaces = resource.namespaces
        self._mappings = resource.mappings
        self._path = Path(path)
        self._interval = interval
        self._stop_event = stop_event
        self._state: Dict[str, SeedEntry] = {}

    def run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.poll()
            except Exception:  # pragma: no cover - logged below
                LOG.exception("seed watcher encountered an error")
            self._stop_event.wait(self._interval)

    def poll(self) -> None:
        if not self._path.exists():
            LOG.debug("seed file %s does not exist yet", self._path)
            return

        try:
            payload = json.loads(self._path.read_text())
        except json.JSONDecodeError as exc:
            LOG.warning("failed to parse seed file %s: %s", self._path, exc)
            return

        try:
            desired = _extract_state(payload)
        except (ValueError, AttributeError, CatalogError) as exc:
            LOG.warning("invalid seed file %s: %s", self._path, exc)
            return

        for name, entry in desired.items():
            if self._state.get(name) == entry:
                continue
            LOG.debug("seed entry for namespace %s changed", name)
            self._apply(entry)

        self._state = desired

    def _apply(self, entry: SeedEntry) -> None:
        existing = self._namespaces.get_by_name(entry.namespace.name)
        if existing is None:
            namespace = self._namespaces.add(entry.namespace)
        elif replace(existing, id=None, timestamp=None) != replace(entry.namespace, timestamp=None):
            namespace = self._namespaces.upsert(existing.id, entry.namespace)
        else:
            namespace = existing

        current: List[Assignment] = sorted(
            (m.service_name, m.cluster_id) for m in self._mappings.list_all(namespace.id)
        )
        if current == list(entry.assignments):
            return
        self._mappings.replace_all(
            namespace.id,
            [
                NamespaceServiceClusterMapping(namespace.id, service, cluster)
                for service, cluster in entry.assignments
            ],
        )
