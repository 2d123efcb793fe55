"""Spreadsheet (.xlsx) backup codec."""

from gastozen.services.spreadsheet.codec import (
    ACCOUNTS_SHEET,
    CATEGORIES_SHEET,
    REQUIRED_SHEETS,
    TRANSACTIONS_SHEET,
    SpreadsheetFormatError,
    read_workbook,
    write_workbook,
)
from gastozen.services.spreadsheet.export import build_export_sheets, export_filename

__all__ = [
    "ACCOUNTS_SHEET",
    "CATEGORIES_SHEET",
    "REQUIRED_SHEETS",
    "SpreadsheetFormatError",
    "TRANSACTIONS_SHEET",
    "build_export_sheets",
    "export_filename",
    "read_workbook",
    "write_workbook",
]
