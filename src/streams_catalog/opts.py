"""oslo.config options for services embedding the catalog.

The options live in a dedicated ``catalog`` group so they can be registered
next to a host service's own settings without clashing.
"""

from oslo_config import cfg

CATALOG_GROUP = "catalog"

catalog_opts = [
    cfg.StrOpt('store_type',
               default='memory',
               choices=['memory', 'file'],
               help='Backend holding namespaces, mappings and topologies.'),
    cfg.StrOpt('store_path',
               default='/var/lib/streams-catalog/catalog.json',
               help='JSON document used when store_type is "file".'),
    cfg.BoolOpt('enforce_unique_name_on_upsert',
                default=False,
                help='Reject namespace upserts whose name is already used by '
                     'another namespace id instead of only logging a warning.'),
]


def register_catalog_opts(conf=None):
    """Register the catalog options on ``conf`` (global CONF by default)."""
    conf = conf if conf is not None else cfg.CONF
    conf.register_opts(catalog_opts, group=CATALOG_GROUP)
    return conf


def list_opts():
    """Entry point for oslo-config-generator."""
    return [(CATALOG_GROUP, catalog_opts)]


def catalog_settings_from_conf(conf):
    """Read the registered catalog options into plain keyword arguments.

    Returns:
        Dict with 'store_type', 'store_path' and
        'enforce_unique_name_on_upsert' keys
    """
    group = getattr(conf, CATALOG_GROUP)
    return {
        'store_type': group.store_type,
        'store_path': group.store_path,
        'enforce_unique_name_on_upsert': group.enforce_unique_name_on_upsert,
    }


def build_resource_from_conf(conf):
    """Build a catalog resource from registered oslo.config options."""
    from .resource import build_resource
    from .store import FileStore, MemoryStore

    settings = catalog_settings_from_conf(conf)
    if settings['store_type'] == 'file':
        store = FileStore(settings['store_path'])
    else:
        store = MemoryStore()
    return build_resource(
        store,
        enforce_unique_name_on_upsert=settings['enforce_unique_name_on_upsert'],
    )
