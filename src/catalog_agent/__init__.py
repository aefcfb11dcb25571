"""Runtime helpers for running the namespace catalog from the command line."""

from .config import AgentConfig, load_config  # noqa: F401

__all__ = [
    "AgentConfig",
    "load_config",
]
