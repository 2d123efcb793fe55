"""
Ledger Package

The ledger consistency engine, its balance primitives and the state
repository that persists it.
"""

from gastozen.ledger.balance import (
    AccountNotFoundError,
    BalanceMode,
    apply_balance_delta,
    apply_effect,
    reverse_effect,
    sort_by_date_desc,
    working_copy,
)
from gastozen.ledger.engine import LedgerEngine, format_amount
from gastozen.ledger.state import STATE_KEYS, StateRepository

__all__ = [
    "AccountNotFoundError",
    "BalanceMode",
    "LedgerEngine",
    "STATE_KEYS",
    "StateRepository",
    "apply_balance_delta",
    "apply_effect",
    "format_amount",
    "reverse_effect",
    "sort_by_date_desc",
    "working_copy",
]
