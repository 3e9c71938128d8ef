"""
Abstract Storage Interface

DESIGN DECISION: Persistence is a plain key-value store with string values.
This allows us to:
1. Keep the portfolio on local disk today
2. Use in-memory storage for testing
3. Swap in another backend without touching the persistence service

The interface is intentionally tiny: get, set, remove. Serialization and
fallback logic live in the persistence service, not here.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract interface for key-value storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under key.

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> bool:
        """
        Store value under key, replacing any previous value.

        Returns:
            True if stored successfully

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """
        Delete key. Removing an absent key is not an error.

        Raises:
            StorageError: If the backend cannot be written
        """
        pass

    def is_available(self) -> bool:
        """
        Check the backend can round-trip a value.
        """
        probe = "__storage_test__"
        try:
            self.set(probe, probe)
            ok = self.get(probe) == probe
            self.remove(probe)
            return ok
        except StorageError:
            return False


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageUnavailableError(StorageError):
    """The storage backend cannot be used at all."""
    pass
