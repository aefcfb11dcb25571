"""Watcher implementations used by the catalog agent."""

from .seed import SeedFileWatcher  # noqa: F401

__all__ = ["SeedFileWatcher"]
