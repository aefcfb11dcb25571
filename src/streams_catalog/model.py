"""Entities tracked by the namespace catalog.

These light-weight dataclasses describe namespaces, service to cluster
mappings and the small slice of a topology the catalog needs to look at.  They
serialise to and from the camelCase dictionaries used on the wire so the
resource layer and the stores can share a single representation.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import BadRequest

MappingKey = Tuple[int, str, int]


def _require(payload: Mapping[str, Any], key: str, entity: str) -> Any:
    value = payload.get(key)
    if value is None:
        raise BadRequest(f"{entity} payload missing '{key}'")
    return value


def as_int(value: Any, key: str) -> int:
    """Parse ``value`` as an integer without truncating.

    Accepts ints, integral floats and base-10 digit strings; anything else
    (booleans, ``1.9``, ``"1.9"``) raises :class:`BadRequest`.
    """

    if isinstance(value, bool):
        raise BadRequest(f"'{key}' must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip(), 10)
        except ValueError:
            pass
    raise BadRequest(f"'{key}' must be an integer, got {value!r}")


def _optional_int(payload: Mapping[str, Any], key: str) -> Optional[int]:
    value = payload.get(key)
    if value is None:
        return None
    return as_int(value, key)


def _optional_str(payload: Mapping[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    return None if value is None else str(value)


@dataclass(frozen=True)
class Namespace:
    """A named deployment grouping.

    Attributes
    ----------
    name:
        Unique name of the namespace.
    id:
        Store assigned identifier, ``None`` until the namespace is persisted.
    streaming_engine:
        Name of the streaming engine bound to the namespace (e.g. ``STORM``).
    time_series_db:
        Optional time-series store bound to the namespace.
    description:
        Free form text.
    timestamp:
        Last modification time in epoch milliseconds.
    """

    name: str
    id: Optional[int] = None
    streaming_engine: Optional[str] = None
    time_series_db: Optional[str] = None
    description: Optional[str] = None
    timestamp: Optional[int] = None

    def with_id(self, namespace_id: int) -> "Namespace":
        return replace(self, id=namespace_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "streamingEngine": self.streaming_engine,
            "timeSeriesDB": self.time_series_db,
            "description": self.description,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Namespace":
        if not isinstance(payload, Mapping):
            raise BadRequest("namespace payload must be a mapping")
        name = _require(payload, "name", "namespace")
        if not isinstance(name, str) or not name:
            raise BadRequest("namespace 'name' must be a non-empty string")
        return cls(
            name=name,
            id=_optional_int(payload, "id"),
            streaming_engine=_optional_str(payload, "streamingEngine"),
            time_series_db=_optional_str(payload, "timeSeriesDB"),
            description=_optional_str(payload, "description"),
            timestamp=_optional_int(payload, "timestamp"),
        )


@dataclass(frozen=True)
class NamespaceServiceClusterMapping:
    """Service ``service_name`` of namespace ``namespace_id`` runs on ``cluster_id``."""

    namespace_id: int
    service_name: str
    cluster_id: int

    @property
    def key(self) -> MappingKey:
        return self.namespace_id, self.service_name, self.cluster_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "namespaceId": self.namespace_id,
            "serviceName": self.service_name,
            "clusterId": self.cluster_id,
        }

    @classmethod
    def from_dict(
        cls,
        payload: Mapping[str, Any],
        namespace_id: Optional[int] = None,
    ) -> "NamespaceServiceClusterMapping":
        """Build a mapping from ``payload``.

        ``namespace_id`` fills in the namespace when the payload omits it,
        which is how mappings are posted under a namespace path.
        """

        if not isinstance(payload, Mapping):
            raise BadRequest("mapping payload must be a mapping")
        raw_namespace = payload.get("namespaceId", namespace_id)
        if raw_namespace is None:
            raise BadRequest("mapping payload missing 'namespaceId'")
        service_name = _require(payload, "serviceName", "mapping")
        if not isinstance(service_name, str) or not service_name:
            raise BadRequest("mapping 'serviceName' must be a non-empty string")
        return cls(
            namespace_id=as_int(raw_namespace, "namespaceId"),
            service_name=service_name,
            cluster_id=as_int(_require(payload, "clusterId", "mapping"), "clusterId"),
        )


@dataclass(frozen=True)
class Topology:
    """The part of a deployed topology the catalog reads."""

    id: int
    name: str
    namespace_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "namespaceId": self.namespace_id}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Topology":
        return cls(
            id=as_int(_require(payload, "id", "topology"), "id"),
            name=str(payload.get("name", "")),
            namespace_id=_optional_int(payload, "namespaceId"),
        )


@dataclass(frozen=True)
class NamespaceWithMappings:
    """Detail view pairing a namespace with its current mappings."""

    namespace: Namespace
    mappings: List[NamespaceServiceClusterMapping] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "namespace": self.namespace.to_dict(),
            "mappings": [m.to_dict() for m in self.mappings],
        }
