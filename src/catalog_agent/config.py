"""YAML configuration loader for the catalog agent."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Sequence

import yaml

from streams_catalog.store import FileStore, MemoryStore, Store

STORE_TYPES = ("memory", "file")


@dataclass
class StoreConfig:
    type: str = "file"
    path: Path = Path("catalog.json")

    def build(self) -> Store:
        if self.type == "memory":
            return MemoryStore()
        return FileStore(self.path)


@dataclass
class CatalogConfig:
    enforce_unique_name_on_upsert: bool = False


@dataclass
class WatcherConfig:
    type: str
    path: Path
    interval: float = 5.0


@dataclass
class AgentConfig:
    store: StoreConfig = field(default_factory=StoreConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    watchers: Sequence[WatcherConfig] = field(default_factory=list)


def _parse_store(section: dict) -> StoreConfig:
    store_type = str(section.get("type", "file"))
    if store_type not in STORE_TYPES:
        raise ValueError(f"Unsupported store type '{store_type}'")
    path = section.get("path")
    if store_type == "file" and not path:
        raise ValueError("file store requires a 'path'")
    return StoreConfig(type=store_type, path=Path(path or "catalog.json"))


def _parse_catalog(section: dict) -> CatalogConfig:
    return CatalogConfig(
        enforce_unique_name_on_upsert=bool(
            section.get("enforce_unique_name_on_upsert", False)
        ),
    )


def _parse_watchers(entries: Iterable[dict]) -> List[WatcherConfig]:
    watchers: List[WatcherConfig] = []
    for entry in entries:
        if "path" not in entry:
            raise ValueError("watcher entry missing 'path'")
        watchers.append(
            WatcherConfig(
                type=str(entry.get("type", "file")),
                path=Path(entry["path"]),
                interval=float(entry.get("interval", entry.get("poll_interval", 5.0))),
            )
        )
    return watchers


def _section(data: dict, name: str) -> dict:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' section must be a mapping")
    return section


def load_config(path: Path) -> AgentConfig:
    data = yaml.safe_load(path.read_text())
    if data is None:
        return AgentConfig()
    if not isinstance(data, dict):
        raise ValueError("Agent configuration must be a mapping")

    store = _parse_store(_section(data, "store"))
    catalog = _parse_catalog(_section(data, "catalog"))

    watchers_section = data.get("watchers", [])
    if not isinstance(watchers_section, list):
        raise ValueError("'watchers' section must be a list")
    watchers = _parse_watchers(watchers_section)

    return AgentConfig(store=store, catalog=catalog, watchers=watchers)
