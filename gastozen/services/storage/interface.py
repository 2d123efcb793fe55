"""
Abstract Storage Interface

The ledger persists its state as a handful of JSON strings under fixed
keys ("transactions", "accounts", "categories", "theme"). Any backend
that can store string values by key can hold a GastoZen ledger:
a local JSON file, memory (tests), or a Google Sheets worksheet.

CRITICAL: `set_many` must be atomic. The three entity collections are
always written together, and a reader must never observe the new
transactions next to the old accounts.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Mapping, Optional


class KeyValueStoreInterface(ABC):
    """
    Abstract interface for key-value state storage.

    Any storage implementation (JSON file, Google Sheets, etc.)
    must implement these methods.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set_many(self, values: Mapping[str, str]) -> None:
        """
        Write several keys in one atomic step.

        Raises:
            StorageError: If the write fails (nothing is written)
        """
        pass

    @abstractmethod
    def delete_many(self, keys: Iterable[str]) -> None:
        """
        Remove several keys in one step. Missing keys are ignored.

        Raises:
            StorageError: If the write fails
        """
        pass

    def set(self, key: str, value: str) -> None:
        """Write a single key."""
        self.set_many({key: value})

    def delete(self, key: str) -> None:
        """Remove a single key."""
        self.delete_many([key])


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Storage location (file, spreadsheet, worksheet) not found."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
