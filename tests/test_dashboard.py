"""Tests for the dashboard aggregates."""

import datetime as dt
from decimal import Decimal

from gastozen.models import Transaction, TransactionType
from gastozen.queries import expenses_by_category, monthly_totals, total_balance
from gastozen.queries.dashboard import UNCATEGORIZED_NAME


MAY = dt.date(2024, 5, 1)


def transaction(amount, type=TransactionType.EXPENSE, category_id="cat-food", date=dt.date(2024, 5, 10)):
    return Transaction(
        amount=Decimal(str(amount)),
        type=type,
        category_id=category_id,
        account_id="acc-main",
        date=date,
    )


class TestDashboard:
    """Tests for total_balance, monthly_totals and expenses_by_category."""

    def test_total_balance(self, accounts):
        assert total_balance(accounts) == Decimal("150")
        assert total_balance([]) == Decimal("0")

    def test_monthly_totals_ignore_other_months(self):
        transactions = [
            transaction(1000, type=TransactionType.INCOME, category_id="cat-salary"),
            transaction(300),
            transaction(50, date=dt.date(2024, 4, 30)),
        ]
        totals = monthly_totals(transactions, month=MAY)
        assert (totals.year, totals.month) == (2024, 5)
        assert totals.income == Decimal("1000")
        assert totals.expenses == Decimal("300")
        assert totals.net == Decimal("700")

    def test_expenses_by_category(self, categories):
        transactions = [
            transaction(10, category_id="cat-misc"),
            transaction(30),
            transaction(15),
            transaction(5, category_id="cat-deleted"),
            transaction(999, type=TransactionType.INCOME, category_id="cat-salary"),
        ]
        totals = expenses_by_category(transactions, categories, month=MAY)
        assert [(t.name, t.total) for t in totals] == [
            ("Alimentación", Decimal("45")),
            ("Gasto Diverso", Decimal("10")),
            (UNCATEGORIZED_NAME, Decimal("5")),
        ]

    def test_expenses_by_category_limit(self, categories):
        transactions = [transaction(30), transaction(10, category_id="cat-misc")]
        totals = expenses_by_category(transactions, categories, month=MAY, limit=1)
        assert [t.category_id for t in totals] == ["cat-food"]
