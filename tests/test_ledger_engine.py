"""
Tests for the ledger consistency engine.

Every test runs against an InMemoryStore, so persistence is real
(JSON round trip through the repository) but nothing touches disk.
"""

import datetime as dt
from decimal import Decimal

import pytest

from gastozen.ledger import (
    AccountNotFoundError,
    BalanceMode,
    LedgerEngine,
    StateRepository,
    apply_balance_delta,
    working_copy,
)
from gastozen.models import (
    Account,
    AccountInput,
    AccountType,
    Category,
    CategoryInput,
    LedgerErrorKind,
    Theme,
    Transaction,
    TransactionType,
)
from gastozen.services.storage import InMemoryStore, StorageError


INCOME = TransactionType.INCOME
EXPENSE = TransactionType.EXPENSE


def balance(engine: LedgerEngine, account_id: str) -> Decimal:
    return engine.get_account(account_id).balance


class RecordingStore(InMemoryStore):
    """Counts writes so tests can check persistence is one atomic step."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.writes = []

    def set_many(self, values):
        self.writes.append(set(values))
        super().set_many(values)


class FailingStore(InMemoryStore):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail = False

    def set_many(self, values):
        if self.fail:
            raise StorageError("disk full")
        super().set_many(values)


class TestBalancePrimitive:
    """Tests for apply_balance_delta."""

    def test_add_subtract_set(self, accounts):
        working = working_copy(accounts)
        apply_balance_delta(working, "acc-main", Decimal("25"), BalanceMode.ADD)
        assert working["acc-main"].balance == Decimal("125")
        apply_balance_delta(working, "acc-main", Decimal("5"), BalanceMode.SUBTRACT)
        assert working["acc-main"].balance == Decimal("120")
        apply_balance_delta(working, "acc-main", Decimal("7"), BalanceMode.SET)
        assert working["acc-main"].balance == Decimal("7")

    def test_unknown_account_raises(self, accounts):
        working = working_copy(accounts)
        with pytest.raises(AccountNotFoundError) as exc_info:
            apply_balance_delta(working, "acc-missing", Decimal("1"), BalanceMode.ADD)
        assert exc_info.value.account_id == "acc-missing"

    def test_working_copy_does_not_touch_originals(self, accounts):
        working = working_copy(accounts)
        apply_balance_delta(working, "acc-main", Decimal("1"), BalanceMode.ADD)
        assert accounts[0].balance == Decimal("100")


class TestAddTransaction:
    """Tests for add_transaction."""

    def test_expense_over_balance_is_rejected(self, engine, store, tx):
        """Balance 100, expense 150: rejected, nothing changes."""
        before = store.snapshot()
        outcome = engine.add_transaction(tx(150))

        assert not outcome.success
        assert outcome.error == LedgerErrorKind.INSUFFICIENT_FUNDS
        assert "Cuenta Principal" in outcome.message
        assert "150" in outcome.message
        assert balance(engine, "acc-main") == Decimal("100")
        assert engine.transactions == ()
        assert store.snapshot() == before

    def test_expense_equal_to_balance_is_accepted(self, engine, tx):
        outcome = engine.add_transaction(tx(100))
        assert outcome.success
        assert balance(engine, "acc-main") == Decimal("0")

    def test_expense_then_delete_restores_balance(self, engine, tx):
        """Balance 100, expense 40 -> 60, delete -> 100."""
        outcome = engine.add_transaction(tx(40))
        assert outcome.success
        assert balance(engine, "acc-main") == Decimal("60")

        deleted = engine.delete_transaction(outcome.transaction.id)
        assert deleted.success
        assert balance(engine, "acc-main") == Decimal("100")
        assert engine.transactions == ()

    def test_income_increases_balance(self, engine, tx):
        outcome = engine.add_transaction(tx(20, type=INCOME, account_id="acc-cash"))
        assert outcome.success
        assert outcome.account.balance == Decimal("70")
        assert balance(engine, "acc-cash") == Decimal("70")

    def test_unknown_account_is_rejected(self, engine, tx):
        outcome = engine.add_transaction(tx(10, account_id="acc-missing"))
        assert not outcome.success
        assert outcome.error == LedgerErrorKind.ACCOUNT_NOT_FOUND

    def test_fresh_ids(self, engine, tx):
        first = engine.add_transaction(tx(1)).transaction
        second = engine.add_transaction(tx(1)).transaction
        assert first.id != second.id
        assert first.id.startswith("trans-")

    def test_sorted_by_date_descending(self, engine, tx):
        for day in (10, 12, 11):
            engine.add_transaction(tx(1, date=dt.date(2024, 5, day)))
        assert [t.date.day for t in engine.transactions] == [12, 11, 10]

    def test_new_transaction_first_among_same_date(self, engine, tx):
        first = engine.add_transaction(tx(1, description="primero")).transaction
        second = engine.add_transaction(tx(1, description="segundo")).transaction
        assert [t.id for t in engine.transactions] == [second.id, first.id]


class TestUpdateTransaction:
    """Tests for update_transaction."""

    def test_income_edited_into_expense(self, engine, tx):
        """Balance 50, income 20 (70), edit to expense 30: effective 50, final 20."""
        added = engine.add_transaction(tx(20, type=INCOME, account_id="acc-cash")).transaction
        assert balance(engine, "acc-cash") == Decimal("70")

        edited = added.model_copy(update={
            "type": EXPENSE,
            "amount": Decimal("30"),
            "category_id": "cat-food",
        })
        outcome = engine.update_transaction(edited)

        assert outcome.success
        assert balance(engine, "acc-cash") == Decimal("20")
        assert engine.get_transaction(added.id).type is EXPENSE

    def test_unchanged_update_keeps_balances(self, engine, tx):
        added = engine.add_transaction(tx(40)).transaction
        before = {a.id: a.balance for a in engine.accounts}

        outcome = engine.update_transaction(added.model_copy())

        assert outcome.success
        assert {a.id: a.balance for a in engine.accounts} == before

    def test_expense_over_effective_balance_is_rejected(self, engine, tx):
        added = engine.add_transaction(tx(40)).transaction  # main: 60, effective 100
        edited = added.model_copy(update={"amount": Decimal("101")})

        outcome = engine.update_transaction(edited)

        assert not outcome.success
        assert outcome.error == LedgerErrorKind.INSUFFICIENT_FUNDS
        assert balance(engine, "acc-main") == Decimal("60")
        assert engine.get_transaction(added.id).amount == Decimal("40")

    def test_expense_up_to_effective_balance_is_accepted(self, engine, tx):
        added = engine.add_transaction(tx(40)).transaction
        outcome = engine.update_transaction(added.model_copy(update={"amount": Decimal("100")}))
        assert outcome.success
        assert balance(engine, "acc-main") == Decimal("0")

    def test_move_to_another_account(self, engine, tx):
        added = engine.add_transaction(tx(40)).transaction  # main 60
        outcome = engine.update_transaction(added.model_copy(update={"account_id": "acc-cash"}))

        assert outcome.success
        assert balance(engine, "acc-main") == Decimal("100")
        assert balance(engine, "acc-cash") == Decimal("10")

    def test_move_checks_destination_balance(self, engine, tx):
        added = engine.add_transaction(tx(40)).transaction
        outcome = engine.update_transaction(added.model_copy(update={
            "account_id": "acc-cash",
            "amount": Decimal("60"),
        }))

        assert not outcome.success
        assert outcome.error == LedgerErrorKind.INSUFFICIENT_FUNDS
        assert balance(engine, "acc-main") == Decimal("60")
        assert balance(engine, "acc-cash") == Decimal("50")

    def test_shrinking_spent_income_is_rejected(self, engine, tx):
        income = engine.add_transaction(tx(100, type=INCOME, account_id="acc-cash")).transaction
        engine.add_transaction(tx(120, account_id="acc-cash"))  # cash: 30

        outcome = engine.update_transaction(income.model_copy(update={"amount": Decimal("10")}))

        assert not outcome.success
        assert outcome.error == LedgerErrorKind.NEGATIVE_BALANCE
        assert balance(engine, "acc-cash") == Decimal("30")

    def test_unknown_transaction_is_rejected(self, engine):
        ghost = Transaction(
            id="trans-ghost",
            amount=Decimal("1"),
            type=EXPENSE,
            category_id="cat-food",
            account_id="acc-main",
        )
        outcome = engine.update_transaction(ghost)
        assert not outcome.success
        assert outcome.error == LedgerErrorKind.TRANSACTION_NOT_FOUND

    def test_unknown_target_account_is_rejected(self, engine, tx):
        added = engine.add_transaction(tx(10)).transaction
        outcome = engine.update_transaction(added.model_copy(update={"account_id": "acc-missing"}))
        assert not outcome.success
        assert outcome.error == LedgerErrorKind.ACCOUNT_NOT_FOUND
        assert balance(engine, "acc-main") == Decimal("90")

    def test_resorts_after_date_change(self, engine, tx):
        old = engine.add_transaction(tx(1, date=dt.date(2024, 5, 1))).transaction
        engine.add_transaction(tx(1, date=dt.date(2024, 5, 5)))

        engine.update_transaction(old.model_copy(update={"date": dt.date(2024, 6, 1)}))

        assert engine.transactions[0].id == old.id


class TestDeleteTransaction:
    """Tests for delete_transaction."""

    def test_deleting_spent_income_is_rejected(self, engine, tx):
        """Account at 50 after spending an income of 80: delete rejected, stays 50."""
        income = engine.add_transaction(tx(80, type=INCOME, account_id="acc-cash")).transaction
        engine.add_transaction(tx(80, account_id="acc-cash"))
        assert balance(engine, "acc-cash") == Decimal("50")

        outcome = engine.delete_transaction(income.id)

        assert not outcome.success
        assert outcome.error == LedgerErrorKind.NEGATIVE_BALANCE
        assert "Efectivo" in outcome.message
        assert balance(engine, "acc-cash") == Decimal("50")
        assert engine.get_transaction(income.id) is not None

    def test_absent_transaction(self, engine):
        outcome = engine.delete_transaction("trans-nope")
        assert not outcome.success
        assert outcome.error == LedgerErrorKind.TRANSACTION_NOT_FOUND

    def test_deleting_expense_refunds(self, engine, tx):
        expense = engine.add_transaction(tx(30, account_id="acc-cash")).transaction
        assert engine.delete_transaction(expense.id).success
        assert balance(engine, "acc-cash") == Decimal("50")


class TestBalanceInvariant:
    """Each balance equals its base plus the signed sum of its transactions."""

    def test_invariant_over_mixed_sequence(self, engine, tx):
        bases = {a.id: a.balance for a in engine.accounts}

        ids = []
        for amount, kind, account_id in [
            (30, INCOME, "acc-main"),
            (50, EXPENSE, "acc-main"),
            (500, EXPENSE, "acc-cash"),  # rejected
            (10, EXPENSE, "acc-cash"),
            (200, INCOME, "acc-cash"),
        ]:
            outcome = engine.add_transaction(tx(amount, type=kind, account_id=account_id))
            if outcome.success:
                ids.append(outcome.transaction.id)

        engine.update_transaction(engine.get_transaction(ids[1]).model_copy(
            update={"account_id": "acc-cash", "amount": Decimal("70")}
        ))
        engine.delete_transaction(ids[2])

        for account in engine.accounts:
            signed = sum(
                (t.signed_amount for t in engine.transactions if t.account_id == account.id),
                Decimal("0"),
            )
            assert account.balance == bases[account.id] + signed
            assert account.balance >= 0


class TestPersistence:
    """Tests for how mutations reach the store."""

    def test_state_survives_reload(self, store, engine, tx):
        added = engine.add_transaction(tx(40)).transaction

        reopened = LedgerEngine(StateRepository(store))

        assert [t.id for t in reopened.transactions] == [added.id]
        assert balance(reopened, "acc-main") == Decimal("60")

    def test_collections_written_together(self, accounts, categories, tx):
        store = RecordingStore()
        repository = StateRepository(store)
        repository.save_entities([], accounts, categories)
        engine = LedgerEngine(repository)
        store.writes.clear()

        engine.add_transaction(tx(10))

        assert store.writes == [{"transactions", "accounts", "categories"}]

    def test_rejection_writes_nothing(self, accounts, categories, tx):
        store = RecordingStore()
        repository = StateRepository(store)
        repository.save_entities([], accounts, categories)
        engine = LedgerEngine(repository)
        store.writes.clear()

        engine.add_transaction(tx(1000))

        assert store.writes == []

    def test_storage_failure_leaves_state_untouched(self, accounts, categories, tx):
        store = FailingStore()
        repository = StateRepository(store)
        repository.save_entities([], accounts, categories)
        engine = LedgerEngine(repository)
        store.fail = True

        with pytest.raises(StorageError):
            engine.add_transaction(tx(10))

        assert balance(engine, "acc-main") == Decimal("100")
        assert engine.transactions == ()

    def test_empty_store_loads_defaults(self):
        engine = LedgerEngine(StateRepository(InMemoryStore()))
        assert len(engine.accounts) == 4
        assert len(engine.categories) == 17
        assert engine.transactions == ()
        assert engine.theme is Theme.LIGHT

    def test_malformed_value_falls_back_to_defaults(self):
        store = InMemoryStore({"accounts": "{not json"})
        repository = StateRepository(store)
        engine = LedgerEngine(repository)

        assert len(engine.accounts) == 4
        assert store.get("accounts") == "{not json"

    def test_theme_toggle_persists(self, store, engine):
        assert engine.toggle_theme() is Theme.DARK
        assert LedgerEngine(StateRepository(store)).theme is Theme.DARK


class TestAccounts:
    """Tests for account operations."""

    def test_add_account_uses_initial_balance(self, engine):
        outcome = engine.add_account(AccountInput(
            name="Ahorro",
            type=AccountType.SAVINGS,
            initial_balance=Decimal("250"),
        ))
        assert outcome.success
        assert outcome.account.id.startswith("acc-")
        assert balance(engine, outcome.account.id) == Decimal("250")

    def test_update_account_trusts_balance(self, engine):
        account = engine.get_account("acc-main").model_copy(update={
            "name": "Principal",
            "balance": Decimal("999"),
        })
        outcome = engine.update_account(account)
        assert outcome.success
        assert engine.get_account("acc-main").name == "Principal"
        assert balance(engine, "acc-main") == Decimal("999")

    def test_update_unknown_account(self, engine):
        outcome = engine.update_account(Account(id="acc-x", name="X"))
        assert not outcome.success
        assert outcome.error == LedgerErrorKind.ACCOUNT_NOT_FOUND

    def test_delete_account_in_use_is_refused(self, engine, tx):
        engine.add_transaction(tx(10))
        outcome = engine.delete_account("acc-main")
        assert not outcome.success
        assert outcome.error == LedgerErrorKind.IN_USE
        assert engine.get_account("acc-main") is not None

    def test_delete_unused_account(self, engine):
        assert engine.delete_account("acc-cash").success
        assert engine.get_account("acc-cash") is None


class TestCategories:
    """Tests for category operations."""

    def test_add_category_gets_default_icon(self, engine):
        outcome = engine.add_category(CategoryInput(name="Bonos", type=INCOME))
        assert outcome.success
        assert outcome.category.icon == "💰"
        assert outcome.category in engine.categories_of(INCOME)

    def test_update_category(self, engine):
        category = engine.get_category("cat-food").model_copy(update={"name": "Comida"})
        assert engine.update_category(category).success
        assert engine.get_category("cat-food").name == "Comida"

    def test_update_unknown_category(self, engine):
        outcome = engine.update_category(Category(id="cat-x", name="X"))
        assert outcome.error == LedgerErrorKind.CATEGORY_NOT_FOUND

    def test_delete_category_in_use_is_refused(self, engine, tx):
        engine.add_transaction(tx(10, category_id="cat-misc"))
        outcome = engine.delete_category("cat-misc")
        assert outcome.error == LedgerErrorKind.IN_USE

    def test_delete_unused_category(self, engine):
        assert engine.delete_category("cat-other").success
        assert engine.get_category("cat-other") is None
