"""Request-handling layer over the namespace and mapping catalogs.

Each method corresponds to one catalog endpoint.  Arguments arrive already
decoded (path values, query parameters, JSON payloads) and results leave as an
``(HTTPStatus, CatalogResponse)`` pair; binding those to an actual HTTP
framework is left to the embedding service.
"""

from __future__ import annotations

import functools
import logging
from http import HTTPStatus
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple

from . import detail as detail_view
from .errors import (
    AlreadyExists,
    BadRequest,
    CatalogError,
    NotFound,
    ReferencedByTopology,
    composite_id,
)
from .mappings import MappingCatalog
from .model import Namespace, NamespaceServiceClusterMapping
from .namespaces import NamespaceCatalog
from .query import parse_bool, split_query_params
from .response import CatalogResponse, ResponseMessage
from .store import Store
from .topology import StoreTopologyLookup, TopologyLookup

LOG = logging.getLogger(__name__)

Result = Tuple[HTTPStatus, CatalogResponse]


def error_response(exc: CatalogError) -> Result:
    """Translate a catalog error into a status and envelope."""

    if isinstance(exc, NotFound):
        return HTTPStatus.NOT_FOUND, CatalogResponse.failure(
            ResponseMessage.ENTITY_NOT_FOUND, exc.key or str(exc)
        )
    if isinstance(exc, AlreadyExists):
        return HTTPStatus.CONFLICT, CatalogResponse.failure(
            ResponseMessage.ENTITY_ALREADY_EXISTS, str(exc)
        )
    if isinstance(exc, ReferencedByTopology):
        return HTTPStatus.CONFLICT, CatalogResponse.failure(
            ResponseMessage.ENTITY_REFERENCED, str(exc)
        )
    if isinstance(exc, BadRequest):
        return HTTPStatus.BAD_REQUEST, CatalogResponse.failure(
            ResponseMessage.BAD_REQUEST, str(exc)
        )
    raise exc


def _responds(func: Callable[..., Result]) -> Callable[..., Result]:
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Result:
        try:
            return func(*args, **kwargs)
        except CatalogError as exc:
            LOG.debug("%s failed: %s", func.__name__, exc)
            return error_response(exc)

    return wrapper


class NamespaceCatalogResource:
    """Namespace and mapping endpoints of the catalog."""

    def __init__(self, namespaces: NamespaceCatalog, mappings: MappingCatalog) -> None:
        self._namespaces = namespaces
        self._mappings = mappings

    @property
    def namespaces(self) -> NamespaceCatalog:
        return self._namespaces

    @property
    def mappings(self) -> MappingCatalog:
        return self._mappings

    # ------------------------------------------------------------------
    # Namespaces
    # ------------------------------------------------------------------
    @_responds
    def list_namespaces(self, params: Optional[Mapping[str, Any]] = None) -> Result:
        query, detail = split_query_params(params)
        namespaces = self._namespaces.list(query)
        return HTTPStatus.OK, CatalogResponse.success(
            entities=detail_view.compose(self._mappings, namespaces, detail)
        )

    @_responds
    def get_namespace_by_id(self, namespace_id: int, detail: Any = None) -> Result:
        namespace = self._namespaces.get_by_id(namespace_id)
        if namespace is None:
            raise NotFound.by_id(namespace_id)
        return self._single(namespace, detail)

    @_responds
    def get_namespace_by_name(self, name: str, detail: Any = None) -> Result:
        namespace = self._namespaces.get_by_name(name)
        if namespace is None:
            raise NotFound.by_name(name)
        return self._single(namespace, detail)

    def _single(self, namespace: Namespace, detail: Any) -> Result:
        entity = detail_view.compose(self._mappings, namespace, parse_bool(detail) is True)
        return HTTPStatus.OK, CatalogResponse.success(entity=entity)

    @_responds
    def add_namespace(self, payload: Mapping[str, Any]) -> Result:
        created = self._namespaces.add(Namespace.from_dict(payload))
        return HTTPStatus.CREATED, CatalogResponse.success(entity=created)

    @_responds
    def add_or_update_namespace(self, namespace_id: int, payload: Mapping[str, Any]) -> Result:
        stored = self._namespaces.upsert(namespace_id, Namespace.from_dict(payload))
        return HTTPStatus.OK, CatalogResponse.success(entity=stored)

    @_responds
    def remove_namespace(self, namespace_id: int) -> Result:
        removed = self._namespaces.remove(namespace_id)
        if removed is None:
            raise NotFound.by_id(namespace_id)
        return HTTPStatus.OK, CatalogResponse.success(entity=removed)

    # ------------------------------------------------------------------
    # Mappings
    # ------------------------------------------------------------------
    @_responds
    def list_service_cluster_mappings(self, namespace_id: int) -> Result:
        mappings = self._mappings.list_all(namespace_id)
        return HTTPStatus.OK, CatalogResponse.success(entities=mappings)

    @_responds
    def find_service_cluster_mappings(self, namespace_id: int, service_name: str) -> Result:
        mappings = self._mappings.list_by_service(namespace_id, service_name)
        return HTTPStatus.OK, CatalogResponse.success(entities=mappings)

    @_responds
    def set_services_to_clusters(
        self, namespace_id: int, payloads: Sequence[Mapping[str, Any]]
    ) -> Result:
        if not isinstance(payloads, (list, tuple)):
            raise BadRequest("bulk mapping payload must be a list")
        mappings = [
            NamespaceServiceClusterMapping.from_dict(p, namespace_id=namespace_id)
            for p in payloads
        ]
        created = self._mappings.replace_all(namespace_id, mappings)
        return HTTPStatus.CREATED, CatalogResponse.success(entities=created)

    @_responds
    def map_service_to_cluster(self, namespace_id: int, payload: Mapping[str, Any]) -> Result:
        mapping = NamespaceServiceClusterMapping.from_dict(payload, namespace_id=namespace_id)
        if mapping.namespace_id != namespace_id:
            raise BadRequest(
                f"mapping namespaceId {mapping.namespace_id} does not match namespace {namespace_id}"
            )
        created = self._mappings.upsert_one(mapping)
        return HTTPStatus.CREATED, CatalogResponse.success(entity=created)

    @_responds
    def unmap_service_from_cluster(
        self, namespace_id: int, service_name: str, cluster_id: int
    ) -> Result:
        removed = self._mappings.remove_one(namespace_id, service_name, cluster_id)
        if removed is None:
            raise NotFound.by_id(composite_id(namespace_id, service_name, cluster_id))
        return HTTPStatus.OK, CatalogResponse.success(entity=removed)

    @_responds
    def unmap_all_services(self, namespace_id: int) -> Result:
        removed = self._mappings.remove_all(namespace_id)
        return HTTPStatus.OK, CatalogResponse.success(entities=removed)


def build_resource(
    store: Store,
    topologies: Optional[TopologyLookup] = None,
    *,
    enforce_unique_name_on_upsert: bool = False,
) -> NamespaceCatalogResource:
    """Wire both catalogs over ``store`` and wrap them in a resource."""

    namespaces = NamespaceCatalog(
        store,
        topologies or StoreTopologyLookup(store),
        enforce_unique_name_on_upsert=enforce_unique_name_on_upsert,
    )
    return NamespaceCatalogResource(namespaces, MappingCatalog(store))
