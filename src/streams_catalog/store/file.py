"""JSON file backed store."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Hashable, Tuple

from ..model import Namespace, NamespaceServiceClusterMapping, Topology
from .base import MAPPING, NAMESPACE, TOPOLOGY
from .memory import MemoryStore

LOG = logging.getLogger(__name__)

# kind -> (decode row, key of decoded value)
_CODECS: Dict[str, Tuple[Callable[[dict], Any], Callable[[Any], Hashable]]] = {
    NAMESPACE: (Namespace.from_dict, lambda ns: ns.id),
    MAPPING: (NamespaceServiceClusterMapping.from_dict, lambda m: m.key),
    TOPOLOGY: (Topology.from_dict, lambda t: t.id),
}


class FileStore(MemoryStore):
    """:class:`MemoryStore` persisted to a single JSON document.

    The document is rewritten after each mutation made outside a transaction
    and once when a transaction commits.
    """

    def __init__(self, path: Path) -> None:
        super().__init__()
        self._path = Path(path)
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        if not self._path.exists():
            LOG.debug("store file %s does not exist yet", self._path)
            return

        payload = json.loads(self._path.read_text() or "{}")
        if not isinstance(payload, dict):
            raise ValueError(f"store file {self._path} must contain a JSON object")

        for kind, rows in payload.get("tables", {}).items():
            codec = _CODECS.get(kind)
            if codec is None:
                raise ValueError(f"store file {self._path} has unknown table '{kind}'")
            decode, key_of = codec
            table = self._table(kind)
            for row in rows:
                value = decode(row)
                table[key_of(value)] = value
        self._sequences.update(
            {kind: int(seq) for kind, seq in payload.get("sequences", {}).items()}
        )
        LOG.debug("loaded store file %s", self._path)

    def _changed(self) -> None:
        if not self.in_transaction:
            self._flush()

    def _committed(self) -> None:
        self._flush()

    def next_id(self, kind: str) -> int:
        with self._lock:
            identifier = super().next_id(kind)
            if not self.in_transaction:
                self._flush()
            return identifier

    def _flush(self) -> None:
        document = {
            "tables": {
                kind: [value.to_dict() for value in rows.values()]
                for kind, rows in self._tables.items()
            },
            "sequences": dict(self._sequences),
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(document, indent=2, sort_keys=True))
        tmp_path.replace(self._path)
