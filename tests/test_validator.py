"""Tests for the two-stage form validators."""

import datetime as dt
from decimal import Decimal

from gastozen.models import TransactionFormValues, TransactionType
from gastozen.validation import (
    AccountFormValidator,
    TransactionFormValidator,
    get_user_friendly_summary,
)


TODAY = dt.date(2024, 5, 10)


def form(**overrides):
    values = {
        "description": "Almuerzo",
        "amount": Decimal("25000"),
        "type": TransactionType.EXPENSE,
        "category_id": "cat-food",
        "account_id": "acc-main",
        "date": TODAY,
    }
    values.update(overrides)
    return TransactionFormValues(**values)


class TestTransactionFormValidator:
    """Tests for TransactionFormValidator."""

    def setup_method(self):
        self.validator = TransactionFormValidator(future_date_tolerance_days=7)

    def test_valid_form(self, categories, accounts):
        result = self.validator.validate(form(), categories, accounts, today=TODAY)
        assert result.can_submit
        assert result.schema_valid
        assert result.semantic_valid
        assert result.warnings == []

    def test_zero_amount_blocks(self, categories, accounts):
        result = self.validator.validate(form(amount=0), categories, accounts, today=TODAY)
        assert not result.can_submit
        assert [i.field for i in result.errors] == ["amount"]
        assert not result.semantic_valid

    def test_missing_and_unknown_ids_block(self, categories, accounts):
        result = self.validator.validate(
            form(category_id="", account_id="acc-gone"), categories, accounts, today=TODAY
        )
        assert {(i.field, i.issue_type) for i in result.errors} == {
            ("category_id", "missing"),
            ("account_id", "unknown"),
        }

    def test_category_type_mismatch_is_a_warning(self, categories, accounts):
        result = self.validator.validate(
            form(type=TransactionType.INCOME), categories, accounts, today=TODAY
        )
        assert result.can_submit
        assert len(result.warnings) == 1
        assert "Alimentación" in result.warnings[0]

    def test_future_date_warning_respects_tolerance(self, categories, accounts):
        near = self.validator.validate(
            form(date=TODAY + dt.timedelta(days=7)), categories, accounts, today=TODAY
        )
        far = self.validator.validate(
            form(date=TODAY + dt.timedelta(days=8)), categories, accounts, today=TODAY
        )
        assert near.warnings == []
        assert far.can_submit
        assert any(i.issue_type == "future_date" for i in far.issues)

    def test_summary(self, categories, accounts):
        ok = self.validator.validate(form(), categories, accounts, today=TODAY)
        bad = self.validator.validate(form(amount=0), categories, accounts, today=TODAY)
        assert get_user_friendly_summary(ok) == "✅ Todo en orden."
        assert "El monto debe ser mayor que cero." in get_user_friendly_summary(bad)


class TestAccountFormValidator:
    """Tests for AccountFormValidator."""

    def setup_method(self):
        self.validator = AccountFormValidator()

    def test_valid_new_account(self):
        result = self.validator.validate("Ahorro", "1500.50", is_new=True)
        assert result.can_submit
        assert result.balance == Decimal("1500.50")

    def test_negative_opening_balance_is_clamped(self):
        result = self.validator.validate("Ahorro", -20, is_new=True)
        assert result.can_submit
        assert result.balance == Decimal("0")
        assert result.issues[0].issue_type == "clamped"

    def test_negative_balance_on_edit_is_an_error(self):
        result = self.validator.validate("Ahorro", -20, is_new=False)
        assert not result.can_submit
        assert result.balance is None

    def test_empty_name_and_bad_number(self):
        result = self.validator.validate("   ", "mil", is_new=True)
        assert {i.field for i in result.errors} == {"name", "balance"}
