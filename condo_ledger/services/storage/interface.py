"""
Abstract Storage Interface

DESIGN DECISION: The ledger is one JSON document stored under one key,
and the session marker is one string under another. Backends therefore
only need the operations of a browser's key/value storage. This allows us to:
1. Keep the dataset in a local JSON file
2. Use in-memory storage for tests and for per-session state
3. Add another backend without touching business logic

The interface is intentionally tiny. Everything about the shape of the
dataset lives in LedgerStore, not here.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract string key/value storage.

    Any backend (memory, file, ...) must implement these methods.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read a value.

        Args:
            key: Storage key

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Replace the value under a key.

        Args:
            key: Storage key
            value: New value

        Raises:
            StorageError: If the write fails (including quota exceeded)
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """
        Delete a key. Removing an absent key is not an error.

        Raises:
            StorageError: If the backend cannot be written
        """
        pass


class StorageError(Exception):
    """Base exception for storage backend operations."""
    pass


class QuotaExceededError(StorageError):
    """The write would exceed the backend's capacity."""
    pass
