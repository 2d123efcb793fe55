"""
GastoZen - Source Package

A personal finance tracker: income and expense transactions recorded
against named accounts and categories, with spreadsheet backup and restore.

CORE GUARANTEES:
1. An account balance always equals its base balance plus the signed
   sum of the transactions that reference it
2. Normal operations never push an account below zero with an expense
3. Rejected operations change nothing
4. AI drafts are suggestions, never ledger entries
"""

__version__ = "1.0.4"
__author__ = "GastoZen Team"
