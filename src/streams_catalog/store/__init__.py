"""Key/value stores backing the catalog."""

from .base import MAPPING, NAMESPACE, TOPOLOGY, Store  # noqa: F401
from .file import FileStore  # noqa: F401
from .memory import MemoryStore  # noqa: F401

__all__ = [
    "FileStore",
    "MAPPING",
    "MemoryStore",
    "NAMESPACE",
    "Store",
    "TOPOLOGY",
]
