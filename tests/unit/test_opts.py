from oslo_config import cfg

from streams_catalog import NamespaceCatalogResource
from streams_catalog.opts import (
    build_resource_from_conf,
    catalog_settings_from_conf,
    list_opts,
    register_catalog_opts,
)
from streams_catalog.store import FileStore


def build_conf():
    conf = cfg.ConfigOpts()
    register_catalog_opts(conf)
    conf([])
    return conf


def test_defaults():
    settings = catalog_settings_from_conf(build_conf())

    assert settings == {
        "store_type": "memory",
        "store_path": "/var/lib/streams-catalog/catalog.json",
        "enforce_unique_name_on_upsert": False,
    }


def test_overrides_build_file_backed_resource(tmp_path):
    conf = build_conf()
    conf.set_override("store_type", "file", group="catalog")
    conf.set_override("store_path", str(tmp_path / "catalog.json"), group="catalog")
    conf.set_override("enforce_unique_name_on_upsert", True, group="catalog")

    resource = build_resource_from_conf(conf)
    resource.add_namespace({"name": "prod"})

    assert isinstance(resource, NamespaceCatalogResource)
    assert (tmp_path / "catalog.json").exists()
    assert isinstance(FileStore(tmp_path / "catalog.json").list("namespace")[0].id, int)


def test_list_opts():
    [(group, opts)] = list_opts()

    assert group == "catalog"
    assert {opt.name for opt in opts} == {
        "store_type",
        "store_path",
        "enforce_unique_name_on_upsert",
    }
