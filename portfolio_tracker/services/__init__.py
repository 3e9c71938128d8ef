"""Services package."""

from portfolio_tracker.services.storage import (
    InMemoryStore,
    JsonFileStore,
    KeyValueStore,
    StorageError,
    StorageUnavailableError,
)

__all__ = [
    # Storage services
    "InMemoryStore",
    "JsonFileStore",
    "KeyValueStore",
    "StorageError",
    "StorageUnavailableError",
]
