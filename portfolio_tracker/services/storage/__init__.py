"""
Storage Services Package

Provides the key-value storage interface and its implementations.
Currently implements local JSON files, but designed to be swappable.
"""

from portfolio_tracker.services.storage.interface import (
    KeyValueStore,
    StorageError,
    StorageUnavailableError,
)
from portfolio_tracker.services.storage.json_file import (
    InMemoryStore,
    JsonFileStore,
)

__all__ = [
    # Interface
    "KeyValueStore",
    # Exceptions
    "StorageError",
    "StorageUnavailableError",
    # Implementations
    "InMemoryStore",
    "JsonFileStore",
]
