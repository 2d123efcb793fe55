"""
Ledger Engine

Owns the entity store and keeps it consistent:

    balance(account) == base balance + signed sum of its transactions

Every operation follows the same shape:
1. Copy the pieces of state it touches
2. Validate and mutate the copies
3. Persist the new collections in ONE atomic write
4. Swap the copies in as the committed state

A rejection returns LedgerOutcome(success=False) before step 3, so a
rejected operation never mutates or persists anything. Rejections are
logged, never raised. Storage failures (StorageError) do propagate,
and they too leave the committed state untouched.
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from gastozen.events import EventLogger
from gastozen.ledger.balance import (
    AccountNotFoundError,
    apply_effect,
    reverse_effect,
    sort_by_date_desc,
    working_copy,
)
from gastozen.ledger.state import StateRepository
from gastozen.models import (
    Account,
    AccountInput,
    Category,
    CategoryInput,
    LedgerErrorKind,
    LedgerEventBuilder,
    LedgerEventType,
    LedgerOutcome,
    LedgerState,
    Theme,
    Transaction,
    TransactionInput,
    TransactionType,
)


def format_amount(value: Decimal) -> str:
    """1234 -> '1,234'; 12.5 -> '12.50'."""
    if value == value.to_integral_value():
        return f"{value:,.0f}"
    return f"{value:,.2f}"


class LedgerEngine:
    """
    The ledger consistency engine.

    Construct one per application and pass it to whoever needs it.
    """

    def __init__(
        self,
        repository: StateRepository,
        event_logger: Optional[EventLogger] = None,
    ):
        self._repository = repository
        self._event_logger = event_logger

        self._transactions: list[Transaction] = []
        self._accounts: list[Account] = []
        self._categories: list[Category] = []
        self._theme = Theme.LIGHT

        self.reload()

    # =========================================================================
    # STATE
    # =========================================================================

    def reload(self) -> LedgerState:
        """Re-read the full state from the store."""
        state = self._repository.load()
        self._transactions = sort_by_date_desc(state.transactions)
        self._accounts = list(state.accounts)
        self._categories = list(state.categories)
        self._theme = state.theme
        return state

    def snapshot(self) -> LedgerState:
        """Deep copy of the committed state."""
        return LedgerState(
            transactions=[t.model_copy(deep=True) for t in self._transactions],
            accounts=[a.model_copy(deep=True) for a in self._accounts],
            categories=[c.model_copy(deep=True) for c in self._categories],
            theme=self._theme,
        )

    def _commit(
        self,
        transactions: Optional[list[Transaction]] = None,
        accounts: Optional[list[Account]] = None,
        categories: Optional[list[Category]] = None,
    ) -> None:
        transactions = self._transactions if transactions is None else transactions
        accounts = self._accounts if accounts is None else accounts
        categories = self._categories if categories is None else categories

        self._repository.save_entities(transactions, accounts, categories)

        self._transactions = transactions
        self._accounts = accounts
        self._categories = categories

    def _reject(
        self,
        operation: str,
        error: LedgerErrorKind,
        message: str,
        entity_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerOutcome:
        if self._event_logger:
            self._event_logger.log_rejection(
                operation=operation,
                error=error,
                message=message,
                entity_id=entity_id,
                correlation_id=correlation_id,
            )
        return LedgerOutcome.rejected(error, message)

    def _log(self, event) -> None:
        if self._event_logger:
            self._event_logger.log(event)

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        """Transactions, newest first."""
        return tuple(self._transactions)

    @property
    def accounts(self) -> tuple[Account, ...]:
        return tuple(self._accounts)

    @property
    def categories(self) -> tuple[Category, ...]:
        return tuple(self._categories)

    @property
    def theme(self) -> Theme:
        return self._theme

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return next((t for t in self._transactions if t.id == transaction_id), None)

    def get_account(self, account_id: str) -> Optional[Account]:
        return next((a for a in self._accounts if a.id == account_id), None)

    def get_category(self, category_id: str) -> Optional[Category]:
        return next((c for c in self._categories if c.id == category_id), None)

    def categories_of(self, transaction_type: TransactionType) -> list[Category]:
        return [c for c in self._categories if c.type == transaction_type]

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    def add_transaction(
        self,
        draft: TransactionInput,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerOutcome:
        """
        Book a new transaction.

        Rejected with INSUFFICIENT_FUNDS when an expense exceeds the
        account balance, ACCOUNT_NOT_FOUND when the account is unknown.
        """
        accounts = working_copy(self._accounts)
        account = accounts.get(draft.account_id)
        if account is None:
            return self._reject(
                "add_transaction",
                LedgerErrorKind.ACCOUNT_NOT_FOUND,
                "La cuenta seleccionada no existe.",
                entity_id=draft.account_id,
                correlation_id=correlation_id,
            )

        if draft.type is TransactionType.EXPENSE and draft.amount > account.balance:
            return self._reject(
                "add_transaction",
                LedgerErrorKind.INSUFFICIENT_FUNDS,
                f"Fondos insuficientes en la cuenta '{account.name}'. "
                f"Monto solicitado: {format_amount(draft.amount)}, "
                f"saldo disponible: {format_amount(account.balance)}.",
                entity_id=account.id,
                correlation_id=correlation_id,
            )

        transaction = Transaction(**draft.model_dump(exclude={"id"}))
        account = apply_effect(accounts, transaction)

        # Prepend so the stable sort keeps it first among same-date entries
        transactions = sort_by_date_desc([transaction, *self._transactions])
        self._commit(transactions=transactions, accounts=list(accounts.values()))

        self._log(LedgerEventBuilder.transaction_added(
            transaction, account, correlation_id=correlation_id
        ))
        return LedgerOutcome.accepted(
            "Transacción agregada.",
            transaction=transaction,
            account=account,
        )

    def update_transaction(
        self,
        updated: Transaction,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerOutcome:
        """
        Replace a transaction, moving its balance effect.

        The protocol is reverse(original) ; validate(updated) ; apply(updated),
        each step on the working copy. An expense larger than the target
        account's effective balance is INSUFFICIENT_FUNDS; an edit that
        drives an account below zero is NEGATIVE_BALANCE.
        """
        original = self.get_transaction(updated.id)
        if original is None:
            return self._reject(
                "update_transaction",
                LedgerErrorKind.TRANSACTION_NOT_FOUND,
                "Transacción original no encontrada.",
                entity_id=updated.id,
                correlation_id=correlation_id,
            )

        accounts = working_copy(self._accounts)
        balances_before = {
            account_id: account.balance for account_id, account in accounts.items()
        }

        try:
            reverse_effect(accounts, original)

            target = accounts.get(updated.account_id)
            if target is None:
                raise AccountNotFoundError(updated.account_id)
            effective_balance = target.balance

            if updated.type is TransactionType.EXPENSE and updated.amount > effective_balance:
                return self._reject(
                    "update_transaction",
                    LedgerErrorKind.INSUFFICIENT_FUNDS,
                    f"Fondos insuficientes en la cuenta '{target.name}'. "
                    f"Monto solicitado: {format_amount(updated.amount)}, "
                    f"saldo efectivo: {format_amount(effective_balance)}.",
                    entity_id=updated.id,
                    correlation_id=correlation_id,
                )

            apply_effect(accounts, updated)
        except AccountNotFoundError as e:
            return self._reject(
                "update_transaction",
                LedgerErrorKind.ACCOUNT_NOT_FOUND,
                "La cuenta de la transacción no existe.",
                entity_id=e.account_id,
                correlation_id=correlation_id,
            )

        for account_id in dict.fromkeys([original.account_id, updated.account_id]):
            account = accounts[account_id]
            if account.balance < 0 and account.balance < balances_before[account_id]:
                return self._reject(
                    "update_transaction",
                    LedgerErrorKind.NEGATIVE_BALANCE,
                    f"La edición dejaría la cuenta '{account.name}' con saldo "
                    f"negativo ({format_amount(account.balance)}).",
                    entity_id=updated.id,
                    correlation_id=correlation_id,
                )

        replacement = updated.model_copy(deep=True)
        transactions = sort_by_date_desc(
            replacement if t.id == replacement.id else t for t in self._transactions
        )
        self._commit(transactions=transactions, accounts=list(accounts.values()))

        self._log(LedgerEventBuilder.transaction_updated(
            original, replacement, correlation_id=correlation_id
        ))
        return LedgerOutcome.accepted(
            "Transacción actualizada.",
            transaction=replacement,
            account=accounts[replacement.account_id],
        )

    def delete_transaction(
        self,
        transaction_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerOutcome:
        """
        Remove a transaction and reverse its effect.

        Deleting an income the account has already spent would leave the
        balance negative and is rejected with NEGATIVE_BALANCE.
        """
        transaction = self.get_transaction(transaction_id)
        if transaction is None:
            return self._reject(
                "delete_transaction",
                LedgerErrorKind.TRANSACTION_NOT_FOUND,
                "Transacción no encontrada.",
                entity_id=transaction_id,
                correlation_id=correlation_id,
            )

        accounts = working_copy(self._accounts)
        try:
            account = reverse_effect(accounts, transaction)
        except AccountNotFoundError as e:
            return self._reject(
                "delete_transaction",
                LedgerErrorKind.ACCOUNT_NOT_FOUND,
                "La cuenta de la transacción no existe.",
                entity_id=e.account_id,
                correlation_id=correlation_id,
            )

        if transaction.type is TransactionType.INCOME and account.balance < 0:
            return self._reject(
                "delete_transaction",
                LedgerErrorKind.NEGATIVE_BALANCE,
                f"No se puede eliminar el ingreso de {format_amount(transaction.amount)}: "
                f"la cuenta '{account.name}' quedaría con saldo "
                f"{format_amount(account.balance)}.",
                entity_id=transaction_id,
                correlation_id=correlation_id,
            )

        transactions = [t for t in self._transactions if t.id != transaction_id]
        self._commit(transactions=transactions, accounts=list(accounts.values()))

        self._log(LedgerEventBuilder.transaction_deleted(
            transaction, correlation_id=correlation_id
        ))
        return LedgerOutcome.accepted(
            "Transacción eliminada.",
            transaction=transaction,
            account=account,
        )

    # =========================================================================
    # ACCOUNTS
    # =========================================================================

    def add_account(
        self,
        account_input: AccountInput,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerOutcome:
        account = Account(
            name=account_input.name,
            type=account_input.type,
            balance=account_input.initial_balance,
            color=account_input.color,
            icon=account_input.icon,
        )
        self._commit(accounts=[*self._accounts, account])

        self._log(LedgerEventBuilder.entity_changed(
            LedgerEventType.ACCOUNT_ADDED, account, correlation_id=correlation_id
        ))
        return LedgerOutcome.accepted("Cuenta creada.", account=account)

    def update_account(
        self,
        account: Account,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerOutcome:
        """Replace an account. The given balance is trusted as-is."""
        if self.get_account(account.id) is None:
            return self._reject(
                "update_account",
                LedgerErrorKind.ACCOUNT_NOT_FOUND,
                "Cuenta no encontrada.",
                entity_id=account.id,
                correlation_id=correlation_id,
            )

        replacement = account.model_copy(deep=True)
        self._commit(accounts=[
            replacement if a.id == replacement.id else a for a in self._accounts
        ])

        self._log(LedgerEventBuilder.entity_changed(
            LedgerEventType.ACCOUNT_UPDATED, replacement, correlation_id=correlation_id
        ))
        return LedgerOutcome.accepted("Cuenta actualizada.", account=replacement)

    def delete_account(
        self,
        account_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerOutcome:
        account = self.get_account(account_id)
        if account is None:
            return self._reject(
                "delete_account",
                LedgerErrorKind.ACCOUNT_NOT_FOUND,
                "Cuenta no encontrada.",
                entity_id=account_id,
                correlation_id=correlation_id,
            )

        if any(t.account_id == account_id for t in self._transactions):
            return self._reject(
                "delete_account",
                LedgerErrorKind.IN_USE,
                f"No se puede eliminar la cuenta '{account.name}' porque tiene "
                "transacciones asociadas.",
                entity_id=account_id,
                correlation_id=correlation_id,
            )

        self._commit(accounts=[a for a in self._accounts if a.id != account_id])

        self._log(LedgerEventBuilder.entity_changed(
            LedgerEventType.ACCOUNT_DELETED, account, correlation_id=correlation_id
        ))
        return LedgerOutcome.accepted("Cuenta eliminada.", account=account)

    # =========================================================================
    # CATEGORIES
    # =========================================================================

    def add_category(
        self,
        category_input: CategoryInput,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerOutcome:
        category = Category(**category_input.model_dump())
        if category.icon is None:
            category.icon = category.type.default_icon
        self._commit(categories=[*self._categories, category])

        self._log(LedgerEventBuilder.entity_changed(
            LedgerEventType.CATEGORY_ADDED, category, correlation_id=correlation_id
        ))
        return LedgerOutcome.accepted("Categoría creada.", category=category)

    def update_category(
        self,
        category: Category,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerOutcome:
        if self.get_category(category.id) is None:
            return self._reject(
                "update_category",
                LedgerErrorKind.CATEGORY_NOT_FOUND,
                "Categoría no encontrada.",
                entity_id=category.id,
                correlation_id=correlation_id,
            )

        replacement = category.model_copy(deep=True)
        self._commit(categories=[
            replacement if c.id == replacement.id else c for c in self._categories
        ])

        self._log(LedgerEventBuilder.entity_changed(
            LedgerEventType.CATEGORY_UPDATED, replacement, correlation_id=correlation_id
        ))
        return LedgerOutcome.accepted("Categoría actualizada.", category=replacement)

    def delete_category(
        self,
        category_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerOutcome:
        category = self.get_category(category_id)
        if category is None:
            return self._reject(
                "delete_category",
                LedgerErrorKind.CATEGORY_NOT_FOUND,
                "Categoría no encontrada.",
                entity_id=category_id,
                correlation_id=correlation_id,
            )

        if any(t.category_id == category_id for t in self._transactions):
            return self._reject(
                "delete_category",
                LedgerErrorKind.IN_USE,
                f"No se puede eliminar la categoría '{category.name}' porque tiene "
                "transacciones asociadas.",
                entity_id=category_id,
                correlation_id=correlation_id,
            )

        self._commit(categories=[c for c in self._categories if c.id != category_id])

        self._log(LedgerEventBuilder.entity_changed(
            LedgerEventType.CATEGORY_DELETED, category, correlation_id=correlation_id
        ))
        return LedgerOutcome.accepted("Categoría eliminada.", category=category)

    # =========================================================================
    # THEME
    # =========================================================================

    def set_theme(self, theme: Theme) -> Theme:
        self._repository.save_theme(theme)
        self._theme = theme
        return theme

    def toggle_theme(self) -> Theme:
        return self.set_theme(self._theme.toggled())
