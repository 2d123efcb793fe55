"""Spreadsheet import reconciliation."""

from gastozen.importer.reconciler import (
    ReconciledDataset,
    fallback_categories,
    first_present,
    normalize_account,
    normalize_category,
    normalize_transaction,
    parse_date,
    parse_number,
    reconcile,
)

__all__ = [
    "ReconciledDataset",
    "fallback_categories",
    "first_present",
    "normalize_account",
    "normalize_category",
    "normalize_transaction",
    "parse_date",
    "parse_number",
    "reconcile",
]
