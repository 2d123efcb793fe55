"""Storage backends for the ledger state."""

from gastozen.services.storage.google_sheets import GoogleSheetsClient, GoogleSheetsStore
from gastozen.services.storage.interface import (
    ConnectionError,
    KeyValueStoreInterface,
    NotFoundError,
    StorageError,
)
from gastozen.services.storage.local import InMemoryStore, JsonFileStore

__all__ = [
    "ConnectionError",
    "GoogleSheetsClient",
    "GoogleSheetsStore",
    "InMemoryStore",
    "JsonFileStore",
    "KeyValueStoreInterface",
    "NotFoundError",
    "StorageError",
]
