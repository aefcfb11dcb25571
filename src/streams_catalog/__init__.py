"""Namespace and service-to-cluster mapping catalog.

This package holds the mutation logic of the stream platform's namespace
catalog.  It keeps track of deployment namespaces and of which cluster runs
each named service (a messaging engine, a time-series store, ...) within a
namespace.  The pieces are:

* :class:`~streams_catalog.namespaces.NamespaceCatalog` which enforces name
  uniqueness and refuses to delete a namespace a topology still refers to;
* :class:`~streams_catalog.mappings.MappingCatalog` for single and bulk
  mapping changes, bulk replacement running inside a store transaction;
* :mod:`streams_catalog.detail` joining namespaces with their mappings; and
* :class:`~streams_catalog.resource.NamespaceCatalogResource` translating the
  outcomes into status codes and a response envelope.

Storage is pluggable through :class:`~streams_catalog.store.Store`; an
in-memory and a JSON file backed implementation are provided.
"""

from .errors import (  # noqa: F401
    AlreadyExists,
    BadRequest,
    CatalogError,
    InvalidFilter,
    NamespaceNotFound,
    NotFound,
    ReferencedByTopology,
)
from .mappings import MappingCatalog  # noqa: F401
from .model import (  # noqa: F401
    Namespace,
    NamespaceServiceClusterMapping,
    NamespaceWithMappings,
    Topology,
)
from .namespaces import NamespaceCatalog  # noqa: F401
from .query import NamespaceQuery  # noqa: F401
from .resource import NamespaceCatalogResource, build_resource  # noqa: F401

__all__ = [
    "AlreadyExists",
    "BadRequest",
    "CatalogError",
    "InvalidFilter",
    "MappingCatalog",
    "Namespace",
    "NamespaceCatalog",
    "NamespaceCatalogResource",
    "NamespaceNotFound",
    "NamespaceQuery",
    "NamespaceServiceClusterMapping",
    "NamespaceWithMappings",
    "NotFound",
    "ReferencedByTopology",
    "Topology",
    "build_resource",
]
