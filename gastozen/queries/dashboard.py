"""
Dashboard Queries

Deterministic aggregates over the ledger for the dashboard page.
They only read what they are given; nothing is estimated.
"""

import datetime as dt
from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from pydantic import BaseModel

from gastozen.models import Account, Category, Transaction, TransactionType


UNCATEGORIZED_NAME = "Sin Categoría"
UNCATEGORIZED_COLOR = "#9CA3AF"


class MonthlyTotals(BaseModel):
    year: int
    month: int
    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")

    @property
    def net(self) -> Decimal:
        return self.income - self.expenses


class CategoryTotal(BaseModel):
    category_id: str
    name: str
    color: str
    total: Decimal


def _in_month(transaction: Transaction, month: dt.date) -> bool:
    return transaction.date.year == month.year and transaction.date.month == month.month


def total_balance(accounts: Iterable[Account]) -> Decimal:
    return sum((a.balance for a in accounts), Decimal("0"))


def monthly_totals(
    transactions: Iterable[Transaction],
    month: Optional[dt.date] = None,
) -> MonthlyTotals:
    """Income and expense sums for the month containing `month` (default: this month)."""
    month = month or dt.date.today()
    totals = MonthlyTotals(year=month.year, month=month.month)
    for t in transactions:
        if not _in_month(t, month):
            continue
        if t.type is TransactionType.INCOME:
            totals.income += t.amount
        else:
            totals.expenses += t.amount
    return totals


def expenses_by_category(
    transactions: Iterable[Transaction],
    categories: Sequence[Category],
    month: Optional[dt.date] = None,
    limit: int = 5,
) -> list[CategoryTotal]:
    """
    Top expense categories of a month, largest first.

    Transactions pointing at an unknown category are grouped under
    "Sin Categoría".
    """
    month = month or dt.date.today()
    by_id = {c.id: c for c in categories}

    sums: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    for t in transactions:
        if t.type is TransactionType.EXPENSE and _in_month(t, month):
            key = t.category_id if t.category_id in by_id else ""
            sums[key] += t.amount

    totals = []
    for category_id, total in sums.items():
        category = by_id.get(category_id)
        totals.append(CategoryTotal(
            category_id=category_id,
            name=category.name if category else UNCATEGORIZED_NAME,
            color=category.color if category else UNCATEGORIZED_COLOR,
            total=total,
        ))
    totals.sort(key=lambda c: c.total, reverse=True)
    return totals[:limit]
