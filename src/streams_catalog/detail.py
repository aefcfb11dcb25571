"""Compose namespaces with their mappings for detail reads."""

from __future__ import annotations

from typing import List, Sequence, Union

from .mappings import MappingCatalog
from .model import Namespace, NamespaceWithMappings


def with_mappings(mappings: MappingCatalog, namespace: Namespace) -> NamespaceWithMappings:
    return NamespaceWithMappings(namespace=namespace, mappings=mappings.list_all(namespace.id))


def compose(
    mappings: MappingCatalog,
    namespaces: Union[Namespace, Sequence[Namespace]],
    detail: bool,
) -> Union[Namespace, NamespaceWithMappings, List[Union[Namespace, NamespaceWithMappings]]]:
    """Return ``namespaces`` unchanged, or paired with mappings when ``detail``."""

    if isinstance(namespaces, Namespace):
        return with_mappings(mappings, namespaces) if detail else namespaces
    if not detail:
        return list(namespaces)
    return [with_mappings(mappings, ns) for ns in namespaces]
