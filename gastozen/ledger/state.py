"""
Ledger State Repository

Maps the entity store onto the key-value store:

    transactions -> JSON list of Transaction
    accounts     -> JSON list of Account
    categories   -> JSON list of Category
    theme        -> "light" | "dark"

A missing key yields the defaults. A malformed value is logged and also
yields the defaults; the stored value stays untouched until the next
write overwrites it.
"""

import json
from typing import Any, Callable, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from gastozen.events import EventLogger
from gastozen.models import (
    Account,
    Category,
    LedgerEventBuilder,
    LedgerState,
    Theme,
    Transaction,
    default_accounts,
    default_categories,
)
from gastozen.services.storage import KeyValueStoreInterface


TRANSACTIONS_KEY = "transactions"
ACCOUNTS_KEY = "accounts"
CATEGORIES_KEY = "categories"
THEME_KEY = "theme"

STATE_KEYS = (TRANSACTIONS_KEY, ACCOUNTS_KEY, CATEGORIES_KEY, THEME_KEY)

_transactions_adapter = TypeAdapter(list[Transaction])
_accounts_adapter = TypeAdapter(list[Account])
_categories_adapter = TypeAdapter(list[Category])


def _dump(items: Sequence[Any]) -> str:
    return json.dumps(
        [item.model_dump(mode="json") for item in items],
        ensure_ascii=False,
    )


class StateRepository:
    """Loads and persists the ledger state through a key-value store."""

    def __init__(
        self,
        store: KeyValueStoreInterface,
        event_logger: Optional[EventLogger] = None,
        default_theme: Theme = Theme.LIGHT,
    ):
        self._store = store
        self._event_logger = event_logger
        self._default_theme = default_theme

    def _read(
        self,
        key: str,
        parse: Callable[[str], Any],
        default: Callable[[], Any],
    ) -> Any:
        raw = self._store.get(key)
        if raw is None:
            return default()
        try:
            return parse(raw)
        except (ValidationError, ValueError) as e:
            if self._event_logger:
                self._event_logger.log(
                    LedgerEventBuilder.malformed_state_value(key, str(e))
                )
            return default()

    def load(self) -> LedgerState:
        """
        Read the full state.

        Raises:
            StorageError: If the store itself cannot be read
        """
        state = LedgerState(
            transactions=self._read(
                TRANSACTIONS_KEY, _transactions_adapter.validate_json, list
            ),
            accounts=self._read(ACCOUNTS_KEY, _accounts_adapter.validate_json, default_accounts),
            categories=self._read(
                CATEGORIES_KEY, _categories_adapter.validate_json, default_categories
            ),
            theme=self._read(THEME_KEY, lambda raw: Theme(json.loads(raw)), lambda: self._default_theme),
        )
        if self._event_logger:
            self._event_logger.log(LedgerEventBuilder.state_loaded(
                accounts=len(state.accounts),
                categories=len(state.categories),
                transactions=len(state.transactions),
            ))
        return state

    def save_entities(
        self,
        transactions: Sequence[Transaction],
        accounts: Sequence[Account],
        categories: Sequence[Category],
    ) -> None:
        """Write the three entity collections in one atomic step."""
        self._store.set_many({
            TRANSACTIONS_KEY: _dump(transactions),
            ACCOUNTS_KEY: _dump(accounts),
            CATEGORIES_KEY: _dump(categories),
        })

    def save_theme(self, theme: Theme) -> None:
        self._store.set(THEME_KEY, json.dumps(theme.value))

    def clear(self) -> None:
        """Remove every ledger key; the next load returns the defaults."""
        self._store.delete_many(STATE_KEYS)
