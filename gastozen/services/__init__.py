"""Services package."""

from gastozen.services.spreadsheet import (
    SpreadsheetFormatError,
    build_export_sheets,
    export_filename,
    read_workbook,
    write_workbook,
)
from gastozen.services.storage import (
    ConnectionError,
    GoogleSheetsClient,
    GoogleSheetsStore,
    InMemoryStore,
    JsonFileStore,
    KeyValueStoreInterface,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Spreadsheet backups
    "SpreadsheetFormatError",
    "build_export_sheets",
    "export_filename",
    "read_workbook",
    "write_workbook",
    # Storage services
    "ConnectionError",
    "GoogleSheetsClient",
    "GoogleSheetsStore",
    "InMemoryStore",
    "JsonFileStore",
    "KeyValueStoreInterface",
    "NotFoundError",
    "StorageError",
]
