"""
Data Models Package

This package contains all Pydantic models used in GastoZen.
All data flowing through the ledger must conform to these schemas.
"""

from gastozen.models.ledger import (
    Account,
    AccountInput,
    AccountType,
    Category,
    CategoryInput,
    LedgerErrorKind,
    LedgerOutcome,
    LedgerState,
    Theme,
    Transaction,
    TransactionDraft,
    TransactionFormValues,
    TransactionInput,
    TransactionType,
    new_id,
)
from gastozen.models.events import (
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventSeverity,
    LedgerEventType,
)
from gastozen.models.defaults import (
    MISC_EXPENSE_CATEGORY_NAME,
    OTHER_INCOME_CATEGORY_NAME,
    default_accounts,
    default_categories,
)

__all__ = [
    # Ledger models
    "Account",
    "AccountInput",
    "AccountType",
    "Category",
    "CategoryInput",
    "LedgerErrorKind",
    "LedgerOutcome",
    "LedgerState",
    "Theme",
    "Transaction",
    "TransactionDraft",
    "TransactionFormValues",
    "TransactionInput",
    "TransactionType",
    "new_id",
    # Event models
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventSeverity",
    "LedgerEventType",
    # Seed data
    "MISC_EXPENSE_CATEGORY_NAME",
    "OTHER_INCOME_CATEGORY_NAME",
    "default_accounts",
    "default_categories",
]
