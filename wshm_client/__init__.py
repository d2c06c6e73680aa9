"""Hypermedia client: applies verb|target|payload frames received over a WebSocket."""

from .config import ClientConfig, ConfigError, load_config
from .core import ConnectionState, Dispatcher, HypermediaClient
from .dom import MemoryDocument, MemoryElement

__all__ = [
    "ClientConfig",
    "ConfigError",
    "ConnectionState",
    "Dispatcher",
    "HypermediaClient",
    "MemoryDocument",
    "MemoryElement",
    "load_config",
]
