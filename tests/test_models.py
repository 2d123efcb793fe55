"""
Tests for GastoZen

Test strategy:
1. Unit tests for individual components (models, validators, reconciler)
2. Integration tests for flows (in-memory store, fake Gemini model)
3. No real API calls in tests
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from gastozen.models import (
    Account,
    AccountType,
    Category,
    LedgerErrorKind,
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventSeverity,
    LedgerEventType,
    LedgerOutcome,
    Theme,
    Transaction,
    TransactionDraft,
    TransactionFormValues,
    TransactionInput,
    TransactionType,
    default_accounts,
    default_categories,
)


class TestLedgerModels:
    """Tests for ledger Pydantic models."""

    def test_transaction_creation(self):
        """Test Transaction model creation with a generated id."""
        transaction = Transaction(
            amount=Decimal("25000"),
            type=TransactionType.EXPENSE,
            category_id="cat-food",
            account_id="acc-checking",
            date=date(2024, 12, 1),
        )
        assert transaction.id.startswith("trans-")
        assert transaction.description == ""
        assert transaction.notes is None

    def test_transaction_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValidationError):
            TransactionInput(
                amount=Decimal("-100"),
                type=TransactionType.EXPENSE,
                category_id="cat-food",
                account_id="acc-checking",
            )

    def test_signed_amount(self):
        """Test that the sign comes from the transaction type."""
        income = TransactionInput(
            amount=Decimal("10"), type=TransactionType.INCOME,
            category_id="cat-salary", account_id="acc-checking",
        )
        expense = income.model_copy(update={"type": TransactionType.EXPENSE})
        assert income.signed_amount == Decimal("10")
        assert expense.signed_amount == Decimal("-10")

    def test_account_strips_whitespace(self):
        """Test that whitespace is stripped from account names."""
        account = Account(name="  Efectivo  ")
        assert account.name == "Efectivo"
        assert account.type == AccountType.OTHER

    def test_category_rejects_bad_color(self):
        """Test that colors must be hex codes."""
        with pytest.raises(ValidationError):
            Category(name="Rara", color="red")

    def test_transaction_json_round_trip(self):
        """Test the persisted JSON shape reads back into the same model."""
        transaction = Transaction(
            amount=Decimal("12.50"),
            type=TransactionType.INCOME,
            category_id="cat-salary",
            account_id="acc-checking",
            notes="propina",
        )
        data = transaction.model_dump(mode="json")
        assert data["type"] == "income"
        assert Transaction.model_validate(data) == transaction

    def test_theme_toggled(self):
        """Test theme toggling."""
        assert Theme.LIGHT.toggled() is Theme.DARK
        assert Theme.DARK.toggled() is Theme.LIGHT


class TestDraftModels:
    """Tests for the assistant draft and the form values."""

    def test_draft_coerces_untrusted_values(self):
        """Test that a sloppy draft still produces usable values."""
        draft = TransactionDraft(
            description=None,
            amount="-30000",
            type="Ingreso",
            date="2024-13-45",
        )
        assert draft.description == ""
        assert draft.amount == Decimal("30000")
        assert draft.type is TransactionType.INCOME
        assert draft.date == date.today()

    def test_form_values_to_input(self):
        """Test that complete form values become a TransactionInput."""
        values = TransactionFormValues(
            amount=Decimal("5"),
            category_id="cat-food",
            account_id="acc-cash",
            notes="",
        )
        transaction_input = values.to_input()
        assert transaction_input.amount == Decimal("5")
        assert transaction_input.notes is None

    def test_incomplete_form_values_fail(self):
        """Test that empty ids cannot become a TransactionInput."""
        with pytest.raises(ValidationError):
            TransactionFormValues(amount=Decimal("5")).to_input()


class TestLedgerOutcome:
    """Tests for LedgerOutcome."""

    def test_rejected(self):
        outcome = LedgerOutcome.rejected(LedgerErrorKind.IN_USE, "En uso")
        assert outcome.success is False
        assert outcome.error == LedgerErrorKind.IN_USE
        assert outcome.transaction is None

    def test_accepted(self):
        account = Account(name="Efectivo")
        outcome = LedgerOutcome.accepted("ok", account=account)
        assert outcome.success is True
        assert outcome.error is None
        assert outcome.account == account


class TestDefaults:
    """Tests for the seed data."""

    def test_default_collections(self):
        """Test the seed data shape."""
        categories = default_categories()
        accounts = default_accounts()
        assert len(categories) == 17
        assert len(accounts) == 4
        assert {c.type for c in categories} == {TransactionType.INCOME, TransactionType.EXPENSE}
        assert any(c.name == "Gasto Diverso" for c in categories)
        assert any(c.name == "Otro Ingreso" for c in categories)

    def test_defaults_are_fresh_copies(self):
        """Test that mutating one copy does not leak into the next."""
        accounts = default_accounts()
        accounts[0].balance = Decimal("1")
        assert default_accounts()[0].balance == Decimal("1000")


class TestEventModels:
    """Tests for ledger event models."""

    def test_event_creation(self):
        """Test LedgerEvent model creation."""
        event = LedgerEvent(
            event_type=LedgerEventType.STATE_LOADED,
            description="Loaded",
        )
        assert event.severity == LedgerEventSeverity.INFO
        assert event.correlation_id is None

    def test_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = LedgerEvent(
            event_type=LedgerEventType.IMPORT_COMPLETED,
            description="Imported",
            details={"transactions": 3},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "import_completed"
        assert log_dict["details"]["transactions"] == 3

    def test_builder_transaction_added(self):
        """Test LedgerEventBuilder.transaction_added."""
        correlation_id = uuid4()
        account = Account(id="acc-cash", name="Efectivo", balance=Decimal("70"))
        transaction = Transaction(
            amount=Decimal("20"), type=TransactionType.INCOME,
            category_id="cat-salary", account_id="acc-cash",
        )

        event = LedgerEventBuilder.transaction_added(
            transaction, account, correlation_id=correlation_id
        )

        assert event.event_type == LedgerEventType.TRANSACTION_ADDED
        assert event.entity_id == transaction.id
        assert event.correlation_id == correlation_id
        assert event.details["new_balance"] == "70"

    def test_builder_rejected(self):
        """Test that rejections are warnings carrying the reason."""
        event = LedgerEventBuilder.rejected(
            "delete_transaction", LedgerErrorKind.NEGATIVE_BALANCE, "saldo negativo"
        )
        assert event.severity == LedgerEventSeverity.WARNING
        assert event.details["error"] == "negative_balance"

    def test_builder_import_with_dropped_rows_warns(self):
        """Test import_completed severity."""
        clean = LedgerEventBuilder.import_completed(1, 1, 1, dropped_rows=0)
        lossy = LedgerEventBuilder.import_completed(1, 1, 1, dropped_rows=2)
        assert clean.severity == LedgerEventSeverity.INFO
        assert lossy.severity == LedgerEventSeverity.WARNING


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
