"""Error kinds surfaced by the catalog."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence


class CatalogError(Exception):
    """Base class for every failure raised by the catalog."""


class NotFound(CatalogError):
    """A namespace, mapping or filter result does not exist."""

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key

    @classmethod
    def by_id(cls, entity_id: object) -> "NotFound":
        return cls(f"Entity with id [{entity_id}] not found.", key=str(entity_id))

    @classmethod
    def by_name(cls, name: str) -> "NotFound":
        return cls(f"Entity with name [{name}] not found.", key=name)


class NamespaceNotFound(NotFound):
    """The namespace an operation is scoped to does not exist."""

    def __init__(self, namespace_id: object) -> None:
        super().__init__(
            f"Namespace with id [{namespace_id}] not found.", key=str(namespace_id)
        )
        self.namespace_id = namespace_id


class AlreadyExists(CatalogError):
    """A namespace with the same name is already present."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Namespace entity already exists with name {name}")
        self.name = name


class ReferencedByTopology(CatalogError):
    """A namespace cannot be removed while a topology refers to it."""

    def __init__(self, namespace_id: int, topology_ids: Iterable[int]) -> None:
        self.namespace_id = namespace_id
        self.topology_ids: Sequence[int] = tuple(topology_ids)
        super().__init__(
            "Topology refers the namespace trying to remove - namespace id: "
            f"{namespace_id}, topology ids: {list(self.topology_ids)}"
        )


class BadRequest(CatalogError):
    """Malformed payload or filter."""


class InvalidFilter(BadRequest):
    """A filter names a field that is not filterable or carries a bad value."""

    def __init__(self, field_name: str, reason: str) -> None:
        super().__init__(f"invalid filter field '{field_name}': {reason}")
        self.field_name = field_name


def composite_id(namespace_id: object, service_name: str, cluster_id: object = None) -> str:
    """Render a mapping triple for error messages."""

    message = f"Namespace: {namespace_id} / serviceName: {service_name}"
    if cluster_id is not None:
        message += f" / clusterId: {cluster_id}"
    return message
