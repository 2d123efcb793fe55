"""Dashboard query package."""

from gastozen.queries.dashboard import (
    CategoryTotal,
    MonthlyTotals,
    expenses_by_category,
    monthly_totals,
    total_balance,
)

__all__ = [
    "CategoryTotal",
    "MonthlyTotals",
    "expenses_by_category",
    "monthly_totals",
    "total_balance",
]
