"""
Balance Primitives

Pure helpers the ledger engine composes into its operations. They work
on a dict of accounts keyed by id, which the engine builds from copies
of its committed accounts, so nothing here touches committed state.

The edit protocol is spelled out as three steps:

    reverse(original) ; validate(updated) ; apply(updated)

Reversing the original on its own account yields the "effective
balance" used to validate an edit before it is committed.
"""

from decimal import Decimal
from enum import Enum
from typing import Iterable

from gastozen.models import Account, Transaction


class BalanceMode(str, Enum):
    ADD = "add"
    SUBTRACT = "subtract"
    SET = "set"


class AccountNotFoundError(KeyError):
    """A balance change referenced an account that does not exist."""

    def __init__(self, account_id: str):
        super().__init__(account_id)
        self.account_id = account_id

    def __str__(self) -> str:
        return f"Account not found: {self.account_id}"


def apply_balance_delta(
    accounts: dict[str, Account],
    account_id: str,
    amount: Decimal,
    mode: BalanceMode,
) -> Account:
    """
    Change one account's balance. Only `balance` is mutated.

    Raises:
        AccountNotFoundError: If `account_id` is not in `accounts`
    """
    account = accounts.get(account_id)
    if account is None:
        raise AccountNotFoundError(account_id)

    if mode is BalanceMode.ADD:
        account.balance = account.balance + amount
    elif mode is BalanceMode.SUBTRACT:
        account.balance = account.balance - amount
    else:
        account.balance = amount
    return account


def apply_effect(accounts: dict[str, Account], transaction: Transaction) -> Account:
    """Book a transaction: +amount for income, -amount for expense."""
    return apply_balance_delta(
        accounts, transaction.account_id, transaction.signed_amount, BalanceMode.ADD
    )


def reverse_effect(accounts: dict[str, Account], transaction: Transaction) -> Account:
    """Undo a transaction's effect on its account."""
    return apply_balance_delta(
        accounts, transaction.account_id, transaction.signed_amount, BalanceMode.SUBTRACT
    )


def working_copy(accounts: Iterable[Account]) -> dict[str, Account]:
    """Deep copies of the accounts, keyed by id."""
    return {account.id: account.model_copy(deep=True) for account in accounts}


def sort_by_date_desc(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Newest first. Stable, so same-date transactions keep their order."""
    return sorted(transactions, key=lambda t: t.date, reverse=True)
