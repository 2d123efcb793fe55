"""Shared fixtures: an engine over an in-memory store with a small known dataset."""

import datetime as dt
from decimal import Decimal

import pytest

from gastozen.ledger import LedgerEngine, StateRepository
from gastozen.models import (
    Account,
    AccountType,
    Category,
    TransactionInput,
    TransactionType,
)
from gastozen.services.storage import InMemoryStore


@pytest.fixture
def categories():
    return [
        Category(id="cat-food", name="Alimentación", color="#EF4444", type=TransactionType.EXPENSE, icon="🍔"),
        Category(id="cat-misc", name="Gasto Diverso", color="#A855F7", type=TransactionType.EXPENSE, icon="📎"),
        Category(id="cat-salary", name="Salario", color="#16A34A", type=TransactionType.INCOME, icon="💰"),
        Category(id="cat-other", name="Otro Ingreso", color="#065F46", type=TransactionType.INCOME, icon="🪙"),
    ]


@pytest.fixture
def accounts():
    return [
        Account(id="acc-main", name="Cuenta Principal", type=AccountType.CHECKING, balance=Decimal("100")),
        Account(id="acc-cash", name="Efectivo", type=AccountType.CASH, balance=Decimal("50")),
    ]


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def repository(store, accounts, categories):
    repository = StateRepository(store)
    repository.save_entities([], accounts, categories)
    return repository


@pytest.fixture
def engine(repository):
    return LedgerEngine(repository)


def make_input(
    amount,
    type=TransactionType.EXPENSE,
    account_id="acc-main",
    category_id=None,
    date=dt.date(2024, 5, 10),
    description="",
):
    if category_id is None:
        category_id = "cat-salary" if type is TransactionType.INCOME else "cat-food"
    return TransactionInput(
        date=date,
        description=description,
        amount=Decimal(str(amount)),
        type=type,
        category_id=category_id,
        account_id=account_id,
    )


@pytest.fixture
def tx():
    """Factory for TransactionInput."""
    return make_input
