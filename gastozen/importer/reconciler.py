"""
Spreadsheet Import Reconciler

Turns the raw rows of a GastoZen backup (or a hand-made spreadsheet in
the same shape) into a consistent ledger snapshot.

The account balances in the file are treated as BASE balances: every
imported transaction is replayed on top of them, and the result is
floored at zero:

    balance = max(0, base + sum(income) - sum(expense))

Each field is read from two historical column names, the Spanish export
header first and the English field name second. A cell only counts if
it is truthy; empty strings, None and 0 fall through to the next column.

IMPORTANT: This module is pure. It never touches the store; the import
flow in the orchestrator replaces the state and reloads the engine.
"""

import datetime as dt
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional, Sequence

from gastozen.ledger.balance import apply_effect, sort_by_date_desc
from gastozen.models import (
    MISC_EXPENSE_CATEGORY_NAME,
    OTHER_INCOME_CATEGORY_NAME,
    Account,
    AccountType,
    Category,
    Transaction,
    TransactionType,
    new_id,
)


Row = Mapping[str, Any]

IMPORTED_CATEGORY_NAME = "Categoría Importada"
IMPORTED_ACCOUNT_NAME = "Cuenta Importada"
IMPORTED_COLOR = "#CCCCCC"
IMPORTED_ACCOUNT_ICON = "🏦"
MISSING_DESCRIPTION = "N/A"

SPREADSHEET_EPOCH = dt.datetime(1899, 12, 30)

# Free-form date strings, tried in order
DATE_FORMATS = [
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d/%m/%Y",
    "%d-%m-%Y",
    "%d.%m.%Y",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%d/%m/%Y %H:%M",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
]

_HEX_COLOR = re.compile(r"^#(?:[0-9A-Fa-f]{3}){1,2}$")


@dataclass
class ReconciledDataset:
    """A consistent snapshot ready to replace the ledger state."""
    accounts: list[Account] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    dropped_rows: int = 0


# =============================================================================
# CELL HELPERS
# =============================================================================

def first_present(row: Row, *columns: str) -> Any:
    """The first truthy cell among `columns`, else None."""
    for column in columns:
        value = row.get(column)
        if value:
            return value
    return None


def _text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _text_or(value: Any, default: str, max_length: int) -> str:
    if value is None:
        return default
    text = _text(value)[:max_length]
    return text or default


def parse_number(value: Any) -> Decimal:
    """Numeric cells and numeric strings; anything else is 0."""
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        number = Decimal(_text(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return number if number.is_finite() else Decimal("0")


def parse_date(value: Any, today: Optional[dt.date] = None) -> dt.date:
    """
    Read a date cell.

    Accepts native dates/datetimes, spreadsheet serial numbers (days
    since 1899-12-30), ISO strings and a few free-form formats.
    Anything unparseable becomes today.
    """
    today = today or dt.date.today()
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return (SPREADSHEET_EPOCH + dt.timedelta(days=value)).date()
        except OverflowError:
            return today
    if isinstance(value, str):
        text = value.strip()
        try:
            return dt.date.fromisoformat(text)
        except ValueError:
            pass
        for fmt in DATE_FORMATS:
            try:
                return dt.datetime.strptime(text, fmt).date()
            except ValueError:
                continue
    return today


def _color(value: Any) -> str:
    if value is None:
        return IMPORTED_COLOR
    text = _text(value)
    return text if _HEX_COLOR.match(text) else IMPORTED_COLOR


def _id_or_new(value: Any, prefix: str) -> str:
    """Blank id cells count as missing."""
    text = _text(value) if value else ""
    return text or new_id(prefix)


def _icon(value: Any, default: str) -> str:
    if value is None:
        return default
    return _text(value)[:16] or default


# =============================================================================
# NORMALIZATION
# =============================================================================

def _is_income(row: Row, label_column: str) -> bool:
    return row.get(label_column) == TransactionType.INCOME.label or row.get("type") == "income"


def normalize_category(row: Row) -> Category:
    category_type = (
        TransactionType.INCOME if _is_income(row, "Tipo_Categoria") else TransactionType.EXPENSE
    )
    raw_id = first_present(row, "ID_Categoria", "id")
    return Category(
        id=_id_or_new(raw_id, "cat"),
        name=_text_or(first_present(row, "Nombre", "name"), IMPORTED_CATEGORY_NAME, 100),
        color=_color(first_present(row, "Color", "color")),
        type=category_type,
        icon=_icon(first_present(row, "Icono", "icon"), category_type.default_icon),
    )


def normalize_account(row: Row) -> Account:
    """The `Saldo` column becomes the base balance."""
    raw_id = first_present(row, "ID_Cuenta", "id")
    raw_type = first_present(row, "Tipo_Cuenta", "type")
    try:
        account_type = AccountType(_text(raw_type)) if raw_type else AccountType.OTHER
    except ValueError:
        account_type = AccountType.OTHER
    return Account(
        id=_id_or_new(raw_id, "acc"),
        name=_text_or(first_present(row, "Nombre", "name"), IMPORTED_ACCOUNT_NAME, 100),
        type=account_type,
        balance=parse_number(row.get("Saldo")),
        color=_color(first_present(row, "Color", "color")),
        icon=_icon(first_present(row, "Icono", "icon"), IMPORTED_ACCOUNT_ICON),
    )


def fallback_categories(
    categories: Sequence[Category],
) -> dict[TransactionType, Optional[Category]]:
    """Per transaction type: the catch-all category, else the first of that type."""
    preferred = {
        TransactionType.EXPENSE: MISC_EXPENSE_CATEGORY_NAME,
        TransactionType.INCOME: OTHER_INCOME_CATEGORY_NAME,
    }
    fallbacks: dict[TransactionType, Optional[Category]] = {}
    for transaction_type, name in preferred.items():
        of_type = [c for c in categories if c.type == transaction_type]
        fallbacks[transaction_type] = next(
            (c for c in of_type if c.name == name),
            of_type[0] if of_type else None,
        )
    return fallbacks


def normalize_transaction(
    row: Row,
    categories: Sequence[Category],
    accounts: Sequence[Account],
    fallbacks: Mapping[TransactionType, Optional[Category]],
    today: Optional[dt.date] = None,
) -> Optional[Transaction]:
    """
    Resolve one transaction row, or None when it has nowhere to go.

    Category: by id, else by name among categories of the same type,
    else the fallback of the transaction's type. Account: by id, else by
    name, else the first account.
    """
    transaction_type = (
        TransactionType.INCOME if _is_income(row, "Tipo") else TransactionType.EXPENSE
    )
    category_ids = {c.id for c in categories}
    account_ids = {a.id for a in accounts}

    category_id: Optional[str] = None
    raw_category_id = first_present(row, "ID_Categoria", "categoryId")
    if raw_category_id:
        category_id = _text(raw_category_id)
    else:
        category_name = first_present(row, "Nombre_Categoria", "categoryName")
        if category_name:
            match = next(
                (
                    c for c in categories
                    if c.name == _text(category_name) and c.type == transaction_type
                ),
                None,
            )
            category_id = match.id if match else None
    if category_id not in category_ids:
        fallback = fallbacks.get(transaction_type)
        category_id = fallback.id if fallback else None

    account_id: Optional[str] = None
    raw_account_id = first_present(row, "ID_Cuenta", "accountId")
    if raw_account_id:
        account_id = _text(raw_account_id)
    else:
        account_name = first_present(row, "Nombre_Cuenta", "accountName")
        if account_name:
            match = next((a for a in accounts if a.name == _text(account_name)), None)
            account_id = match.id if match else None
    if account_id not in account_ids:
        account_id = accounts[0].id if accounts else None

    if not category_id or not account_id:
        return None

    raw_id = first_present(row, "ID_Transaccion", "id")
    notes = first_present(row, "Notas", "notes")
    return Transaction(
        id=_id_or_new(raw_id, "trans"),
        date=parse_date(first_present(row, "Fecha", "date"), today=today),
        description=_text_or(
            first_present(row, "Descripcion", "description"), MISSING_DESCRIPTION, 200
        ),
        amount=abs(parse_number(first_present(row, "Monto", "amount"))),
        type=transaction_type,
        category_id=category_id,
        account_id=account_id,
        notes=_text(notes)[:1000] if notes else None,
    )


# =============================================================================
# RECONCILIATION
# =============================================================================

def reconcile(
    account_rows: Sequence[Row],
    category_rows: Sequence[Row],
    transaction_rows: Sequence[Row],
    today: Optional[dt.date] = None,
) -> ReconciledDataset:
    """
    Build a consistent dataset from raw spreadsheet rows.

    Rows that resolve to no category or no account are dropped and
    counted in `dropped_rows`.
    """
    categories = [normalize_category(row) for row in category_rows]
    fallbacks = fallback_categories(categories)
    accounts = [normalize_account(row) for row in account_rows]

    transactions: list[Transaction] = []
    dropped = 0
    for row in transaction_rows:
        transaction = normalize_transaction(row, categories, accounts, fallbacks, today=today)
        if transaction is None:
            dropped += 1
        else:
            transactions.append(transaction)

    # Replay every transaction on top of the base balances
    by_id = {account.id: account for account in accounts}
    for transaction in transactions:
        apply_effect(by_id, transaction)
    for account in accounts:
        account.balance = max(Decimal("0"), account.balance)

    return ReconciledDataset(
        accounts=accounts,
        categories=categories,
        transactions=sort_by_date_desc(transactions),
        dropped_rows=dropped,
    )
