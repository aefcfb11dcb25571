import logging
import threading
import time

import pytest

from streams_catalog import (
    AlreadyExists,
    MappingCatalog,
    Namespace,
    NamespaceCatalog,
    NamespaceQuery,
    NamespaceServiceClusterMapping,
    ReferencedByTopology,
    Topology,
)
from streams_catalog.store import MAPPING, NAMESPACE, TOPOLOGY, MemoryStore
from streams_catalog.topology import StoreTopologyLookup


def build_catalog(**kwargs):
    store = MemoryStore()
    return store, NamespaceCatalog(store, StoreTopologyLookup(store), **kwargs)


def test_add_assigns_id_and_rejects_duplicate_name():
    _, catalog = build_catalog()

    prod = catalog.add(Namespace(name="prod", streaming_engine="STORM"))

    assert prod.id is not None
    assert catalog.get_by_id(prod.id) == prod
    assert catalog.get_by_name("prod") == prod

    with pytest.raises(AlreadyExists) as excinfo:
        catalog.add(Namespace(name="prod"))
    assert excinfo.value.name == "prod"
    assert len(catalog.list()) == 1


class SlowListStore(MemoryStore):
    """Widens the gap between the name check and the insert."""

    def list(self, kind):
        rows = super().list(kind)
        if kind == NAMESPACE:
            time.sleep(0.01)
        return rows


def test_concurrent_adds_of_same_name_create_one_namespace():
    store = SlowListStore()
    catalog = NamespaceCatalog(store, StoreTopologyLookup(store))
    workers = 8
    barrier = threading.Barrier(workers)
    created, rejected = [], []

    def add_prod():
        barrier.wait()
        try:
            created.append(catalog.add(Namespace(name="prod")))
        except AlreadyExists:
            rejected.append(True)

    threads = [threading.Thread(target=add_prod) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert len(created) == 1
    assert len(rejected) == workers - 1
    assert catalog.list() == created


def test_added_namespaces_have_distinct_names_and_ids():
    _, catalog = build_catalog()

    created = [catalog.add(Namespace(name=f"ns-{i}")) for i in range(5)]

    assert len({ns.id for ns in created}) == 5
    assert len({ns.name for ns in created}) == 5


def test_remove_without_references_succeeds():
    _, catalog = build_catalog()
    prod = catalog.add(Namespace(name="prod"))

    removed = catalog.remove(prod.id)

    assert removed == prod
    assert catalog.get_by_id(prod.id) is None


def test_remove_deletes_mappings_so_upsert_starts_clean():
    store, catalog = build_catalog()
    mappings = MappingCatalog(store)
    prod = catalog.add(Namespace(name="prod"))
    mappings.upsert_one(NamespaceServiceClusterMapping(prod.id, "KAFKA", 1))
    mappings.upsert_one(NamespaceServiceClusterMapping(prod.id, "STORM", 2))

    catalog.remove(prod.id)
    catalog.upsert(prod.id, Namespace(name="fresh"))

    assert mappings.list_all(prod.id) == []
    assert store.list(MAPPING) == []


def test_remove_keeps_mappings_of_other_namespaces():
    store, catalog = build_catalog()
    mappings = MappingCatalog(store)
    prod = catalog.add(Namespace(name="prod"))
    dev = catalog.add(Namespace(name="dev"))
    mappings.upsert_one(NamespaceServiceClusterMapping(prod.id, "KAFKA", 1))
    kept = mappings.upsert_one(NamespaceServiceClusterMapping(dev.id, "KAFKA", 1))

    catalog.remove(prod.id)

    assert store.list(MAPPING) == [kept]


def test_remove_unknown_namespace_returns_none():
    _, catalog = build_catalog()

    assert catalog.remove(42) is None


def test_remove_referenced_namespace_is_rejected():
    store, catalog = build_catalog()
    prod = catalog.add(Namespace(name="prod"))
    store.put(TOPOLOGY, 7, Topology(id=7, name="wordcount", namespace_id=prod.id))

    with pytest.raises(ReferencedByTopology) as excinfo:
        catalog.remove(prod.id)

    assert excinfo.value.namespace_id == prod.id
    assert excinfo.value.topology_ids == (7,)
    assert catalog.get_by_id(prod.id) == prod


def test_topology_on_other_namespace_does_not_block_remove():
    store, catalog = build_catalog()
    prod = catalog.add(Namespace(name="prod"))
    dev = catalog.add(Namespace(name="dev"))
    store.put(TOPOLOGY, 1, Topology(id=1, name="etl", namespace_id=dev.id))

    assert catalog.remove(prod.id) == prod


def test_upsert_is_idempotent():
    _, catalog = build_catalog()
    payload = Namespace(name="staging", streaming_engine="STORM", time_series_db="AMBARI_METRICS")

    first = catalog.upsert(10, payload)
    snapshot = catalog.list()
    second = catalog.upsert(10, payload)

    assert first == second
    assert catalog.list() == snapshot
    assert catalog.get_by_id(10).name == "staging"


def test_upsert_replaces_existing_namespace():
    _, catalog = build_catalog()
    prod = catalog.add(Namespace(name="prod", description="old"))

    updated = catalog.upsert(prod.id, Namespace(name="prod", description="new"))

    assert updated.id == prod.id
    assert catalog.get_by_id(prod.id).description == "new"


def test_add_after_upsert_does_not_reuse_id():
    _, catalog = build_catalog()
    catalog.upsert(5, Namespace(name="five"))

    created = catalog.add(Namespace(name="six"))

    assert created.id == 6


def test_upsert_name_collision_only_warns_by_default(caplog):
    _, catalog = build_catalog()
    catalog.add(Namespace(name="prod"))

    with caplog.at_level(logging.WARNING, logger="streams_catalog.namespaces"):
        catalog.upsert(99, Namespace(name="prod"))

    assert "reuses name 'prod'" in caplog.text
    assert len([ns for ns in catalog.list() if ns.name == "prod"]) == 2


def test_upsert_name_collision_rejected_when_enforced():
    _, catalog = build_catalog(enforce_unique_name_on_upsert=True)
    prod = catalog.add(Namespace(name="prod"))

    with pytest.raises(AlreadyExists):
        catalog.upsert(99, Namespace(name="prod"))

    assert catalog.get_by_id(99) is None
    assert catalog.upsert(prod.id, Namespace(name="prod", description="same id")).id == prod.id


def test_list_with_query():
    _, catalog = build_catalog()
    catalog.add(Namespace(name="prod", streaming_engine="STORM"))
    catalog.add(Namespace(name="dev", streaming_engine="STORM"))
    catalog.add(Namespace(name="lab", streaming_engine="FLINK"))

    storm = catalog.list(NamespaceQuery(streaming_engine="STORM"))
    assert [ns.name for ns in storm] == ["prod", "dev"]

    assert catalog.list(NamespaceQuery(streaming_engine="STORM", name="dev"))[0].name == "dev"
    assert catalog.list(NamespaceQuery(name="missing")) == []
