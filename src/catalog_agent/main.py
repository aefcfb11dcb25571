"""Entry point for the ``streams-catalog`` command line tool."""

from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
from pathlib import Path
from threading import Event
from typing import Any, Callable, Dict, List

from streams_catalog.errors import InvalidFilter
from streams_catalog.query import parse_filter_args
from streams_catalog.resource import (
    NamespaceCatalogResource,
    Result,
    build_resource,
    error_response,
)

from .config import AgentConfig, load_config
from .watchers import SeedFileWatcher

LOG = logging.getLogger(__name__)

DEFAULT_CONFIG = Path("/etc/streams-catalog/catalog.yaml")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


def _read_json(path: Path) -> Any:
    return json.loads(Path(path).read_text())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage the namespace catalog")
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help="Path to the catalog configuration file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    groups = parser.add_subparsers(dest="group", required=True)

    namespaces = groups.add_parser("namespaces", help="Namespace operations")
    ns_cmds = namespaces.add_subparsers(dest="command", required=True)

    ns_list = ns_cmds.add_parser("list", help="List namespaces")
    ns_list.add_argument("--filter", action="append", default=[], metavar="KEY=VALUE")
    ns_list.add_argument("--detail", action="store_true")

    ns_get = ns_cmds.add_parser("get", help="Show one namespace")
    target = ns_get.add_mutually_exclusive_group(required=True)
    target.add_argument("--id", type=int)
    target.add_argument("--name")
    ns_get.add_argument("--detail", action="store_true")

    ns_add = ns_cmds.add_parser("add", help="Add a namespace from a JSON file")
    ns_add.add_argument("--file", type=Path, required=True)

    ns_upsert = ns_cmds.add_parser("upsert", help="Create or replace a namespace at an id")
    ns_upsert.add_argument("--id", type=int, required=True)
    ns_upsert.add_argument("--file", type=Path, required=True)

    ns_remove = ns_cmds.add_parser("remove", help="Remove a namespace")
    ns_remove.add_argument("--id", type=int, required=True)

    mappings = groups.add_parser("mappings", help="Service to cluster mapping operations")
    map_cmds = mappings.add_subparsers(dest="command", required=True)

    map_list = map_cmds.add_parser("list", help="List mappings of a namespace")
    map_list.add_argument("--id", type=int, required=True)
    map_list.add_argument("--service")

    map_add = map_cmds.add_parser("add", help="Map a service to a cluster")
    map_add.add_argument("--id", type=int, required=True)
    map_add.add_argument("--file", type=Path, required=True)

    map_remove = map_cmds.add_parser("remove", help="Remove one mapping")
    map_remove.add_argument("--id", type=int, required=True)
    map_remove.add_argument("--service", required=True)
    map_remove.add_argument("--cluster", type=int, required=True)

    map_remove_all = map_cmds.add_parser("remove-all", help="Remove all mappings of a namespace")
    map_remove_all.add_argument("--id", type=int, required=True)

    map_replace = map_cmds.add_parser("replace", help="Replace all mappings from a JSON list")
    map_replace.add_argument("--id", type=int, required=True)
    map_replace.add_argument("--file", type=Path, required=True)

    groups.add_parser("watch", help="Run the configured seed watchers")
    return parser


def _list_namespaces(resource: NamespaceCatalogResource, args: argparse.Namespace) -> Result:
    params: Dict[str, Any] = parse_filter_args(args.filter)
    if args.detail:
        params["detail"] = "true"
    return resource.list_namespaces(params)


def _get_namespace(resource: NamespaceCatalogResource, args: argparse.Namespace) -> Result:
    if args.id is not None:
        return resource.get_namespace_by_id(args.id, detail=args.detail)
    return resource.get_namespace_by_name(args.name, detail=args.detail)


def _list_mappings(resource: NamespaceCatalogResource, args: argparse.Namespace) -> Result:
    if args.service:
        return resource.find_service_cluster_mappings(args.id, args.service)
    return resource.list_service_cluster_mappings(args.id)


COMMANDS: Dict[tuple, Callable[[NamespaceCatalogResource, argparse.Namespace], Result]] = {
    ("namespaces", "list"): _list_namespaces,
    ("namespaces", "get"): _get_namespace,
    ("namespaces", "add"): lambda r, a: r.add_namespace(_read_json(a.file)),
    ("namespaces", "upsert"): lambda r, a: r.add_or_update_namespace(a.id, _read_json(a.file)),
    ("namespaces", "remove"): lambda r, a: r.remove_namespace(a.id),
    ("mappings", "list"): _list_mappings,
    ("mappings", "add"): lambda r, a: r.map_service_to_cluster(a.id, _read_json(a.file)),
    ("mappings", "remove"): lambda r, a: r.unmap_service_from_cluster(a.id, a.service, a.cluster),
    ("mappings", "remove-all"): lambda r, a: r.unmap_all_services(a.id),
    ("mappings", "replace"): lambda r, a: r.set_services_to_clusters(a.id, _read_json(a.file)),
}


def run_command(resource: NamespaceCatalogResource, args: argparse.Namespace) -> int:
    try:
        status, response = COMMANDS[(args.group, args.command)](resource, args)
    except InvalidFilter as exc:
        LOG.error("%s", exc)
        status, response = error_response(exc)
    print(json.dumps(response.to_dict(), indent=2))
    return 0 if 200 <= status < 300 else 1


def _start_seed_watchers(
    resource: NamespaceCatalogResource, config: AgentConfig, stop_event: Event
) -> List[SeedFileWatcher]:
    started = []
    for watcher_cfg in config.watchers:
        if watcher_cfg.type != "file":
            raise ValueError(f"unsupported watcher type '{watcher_cfg.type}'")
        watcher = SeedFileWatcher(
            resource=resource,
            path=watcher_cfg.path,
            interval=watcher_cfg.interval,
            stop_event=stop_event,
        )
        # seed synchronously so the catalog is populated before the first sleep
        try:
            watcher.poll()
        except Exception:  # pragma: no cover - poll logs its own failures
            LOG.exception("Seeding from %s failed, retrying on the next interval", watcher_cfg.path)
        watcher.start()
        started.append(watcher)
    return started


def watch(resource: NamespaceCatalogResource, config: AgentConfig) -> int:
    stop_event = Event()
    watchers = _start_seed_watchers(resource, config, stop_event)
    if not watchers:
        LOG.warning("No seed files configured, watch has nothing to reconcile")
        return 0

    def _request_stop(signum, frame):  # pragma: no cover - signal handler
        LOG.info("Stopping seed reconciliation on signal %s", signum)
        stop_event.set()

    for signum in (signal.SIGINT, signal.SIGTERM):
        signal.signal(signum, _request_stop)

    try:
        while not stop_event.wait(1.0):
            pass
    except KeyboardInterrupt:  # pragma: no cover - handler not installed
        stop_event.set()

    for watcher in watchers:
        watcher.join()
    LOG.info("Seed reconciliation stopped after %d watcher(s) exited", len(watchers))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)

    if args.config.exists():
        config = load_config(args.config)
    else:
        LOG.debug("config %s not found, using defaults", args.config)
        config = AgentConfig()

    resource = build_resource(
        config.store.build(),
        enforce_unique_name_on_upsert=config.catalog.enforce_unique_name_on_upsert,
    )

    if args.group == "watch":
        return watch(resource, config)
    return run_command(resource, args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
