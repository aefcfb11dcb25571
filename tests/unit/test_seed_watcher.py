import json
import logging
from pathlib import Path
from threading import Event

import pytest

from catalog_agent.config import AgentConfig, WatcherConfig
from catalog_agent.main import _start_seed_watchers, watch
from catalog_agent.watchers import SeedFileWatcher
from streams_catalog import build_resource
from streams_catalog.store import MemoryStore


def build_watcher(tmp_path: Path):
    resource = build_resource(MemoryStore())
    seed_file = tmp_path / "seed.json"
    watcher = SeedFileWatcher(
        resource=resource,
        path=seed_file,
        interval=0.1,
        stop_event=Event(),
    )
    return resource, seed_file, watcher


def write_seed(path: Path, namespaces):
    path.write_text(json.dumps({"namespaces": namespaces}))


def service_clusters(resource, namespace_id):
    return sorted(
        (m.service_name, m.cluster_id)
        for m in resource.mappings.list_all(namespace_id)
    )


def test_seed_watcher_adds_namespaces_and_mappings(tmp_path: Path):
    resource, seed_file, watcher = build_watcher(tmp_path)
    write_seed(
        seed_file,
        [
            {
                "name": "prod",
                "streamingEngine": "STORM",
                "mappings": [
                    {"serviceName": "KAFKA", "clusterId": 1},
                    {"serviceName": "STORM", "clusterId": 1},
                ],
            }
        ],
    )

    watcher.poll()

    prod = resource.namespaces.get_by_name("prod")
    assert prod is not None
    assert prod.streaming_engine == "STORM"
    assert service_clusters(resource, prod.id) == [("KAFKA", 1), ("STORM", 1)]


def test_seed_watcher_reconciles_changes(tmp_path: Path):
    resource, seed_file, watcher = build_watcher(tmp_path)
    write_seed(seed_file, [{"name": "prod", "mappings": [{"serviceName": "KAFKA", "clusterId": 1}]}])
    watcher.poll()
    prod = resource.namespaces.get_by_name("prod")

    write_seed(
        seed_file,
        [
            {
                "name": "prod",
                "description": "production",
                "mappings": [{"serviceName": "KAFKA", "clusterId": 2}],
            }
        ],
    )
    watcher.poll()

    updated = resource.namespaces.get_by_name("prod")
    assert updated.id == prod.id
    assert updated.description == "production"
    assert service_clusters(resource, prod.id) == [("KAFKA", 2)]


def test_seed_watcher_leaves_unlisted_namespaces(tmp_path: Path):
    resource, seed_file, watcher = build_watcher(tmp_path)
    resource.add_namespace({"name": "manual"})
    write_seed(seed_file, [{"name": "prod"}])

    watcher.poll()

    assert resource.namespaces.get_by_name("manual") is not None
    assert resource.namespaces.get_by_name("prod") is not None


def test_seed_watcher_ignores_missing_and_invalid_files(tmp_path: Path):
    resource, seed_file, watcher = build_watcher(tmp_path)

    watcher.poll()

    seed_file.write_text("{not json")
    watcher.poll()

    seed_file.write_text(json.dumps({"tenants": []}))
    watcher.poll()

    seed_file.write_text(json.dumps({"namespaces": [{"description": "no name"}]}))
    watcher.poll()

    assert resource.namespaces.list() == []


def test_start_seed_watchers_seeds_before_returning(tmp_path: Path):
    resource = build_resource(MemoryStore())
    seed_file = tmp_path / "seed.json"
    write_seed(seed_file, [{"name": "prod"}])
    config = AgentConfig(watchers=[WatcherConfig(type="file", path=seed_file, interval=0.1)])
    stop_event = Event()

    watchers = _start_seed_watchers(resource, config, stop_event)
    try:
        assert resource.namespaces.get_by_name("prod") is not None
        assert all(w.is_alive() for w in watchers)
    finally:
        stop_event.set()
        for watcher in watchers:
            watcher.join(timeout=5)
    assert not any(w.is_alive() for w in watchers)


def test_start_seed_watchers_rejects_unknown_type(tmp_path: Path):
    config = AgentConfig(watchers=[WatcherConfig(type="ovsdb", path=tmp_path / "x")])

    with pytest.raises(ValueError, match="ovsdb"):
        _start_seed_watchers(build_resource(MemoryStore()), config, Event())


def test_watch_without_seed_files_returns_immediately(caplog):
    with caplog.at_level(logging.WARNING):
        assert watch(build_resource(MemoryStore()), AgentConfig()) == 0

    assert "No seed files configured" in caplog.text
