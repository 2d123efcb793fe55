"""
Core Data Models for GastoZen

These models define the schemas for everything the ledger stores:
categories, accounts, transactions, and the persisted state snapshot.
They are also the unit of JSON persistence (model_dump(mode="json") on
write, model_validate on read).

INVARIANTS CARRIED BY THE SCHEMA:
1. Transaction amounts are non-negative magnitudes; direction lives in `type`
2. Account types and transaction types are closed sets
3. Identifiers are opaque strings with an entity prefix
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)


HEX_COLOR_PATTERN = r"^#(?:[0-9A-Fa-f]{3}){1,2}$"


def _decimal_to_json(value: Decimal) -> Any:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


# Money: Decimal in Python, a plain number in stored JSON
JsonDecimal = Annotated[
    Decimal, PlainSerializer(_decimal_to_json, return_type=Any, when_used="json")
]


def new_id(prefix: str) -> str:
    """Generate a fresh identifier such as ``trans-3f9a0c1b2d4e``."""
    return f"{prefix}-{uuid4().hex[:12]}"


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def label(self) -> str:
        """Spreadsheet/UI label."""
        return "Ingreso" if self is TransactionType.INCOME else "Gasto"

    @property
    def default_icon(self) -> str:
        return "💰" if self is TransactionType.INCOME else "📎"


class AccountType(str, Enum):
    """Supported account kinds."""
    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT_CARD = "credit_card"
    CASH = "cash"
    INVESTMENT = "investment"
    OTHER = "other"

    @property
    def label(self) -> str:
        return ACCOUNT_TYPE_LABELS[self]


ACCOUNT_TYPE_LABELS = {
    AccountType.CHECKING: "Cuenta Corriente",
    AccountType.SAVINGS: "Ahorros",
    AccountType.CREDIT_CARD: "Tarjeta de Crédito",
    AccountType.CASH: "Efectivo",
    AccountType.INVESTMENT: "Inversión",
    AccountType.OTHER: "Otro",
}


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"

    def toggled(self) -> "Theme":
        return Theme.DARK if self is Theme.LIGHT else Theme.LIGHT


# =============================================================================
# CATEGORY
# =============================================================================

class CategoryInput(BaseModel):
    """Fields a user supplies when creating a category."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category name"
    )
    color: str = Field(
        default="#A855F7",
        pattern=HEX_COLOR_PATTERN,
        description="Hex color used in charts and badges"
    )
    type: TransactionType = Field(
        default=TransactionType.EXPENSE,
        description="Which kind of transaction this category is meant for"
    )
    icon: Optional[str] = Field(
        default=None,
        max_length=16,
        description="Emoji icon"
    )


class Category(CategoryInput):
    """
    A stored category.

    The category type is a convention for the transaction form, not a
    hard constraint: the ledger accepts a transaction whose type differs
    from its category's type.
    """

    id: str = Field(
        default_factory=lambda: new_id("cat"),
        min_length=1,
        description="Unique category ID"
    )


# =============================================================================
# ACCOUNT
# =============================================================================

class AccountInput(BaseModel):
    """Fields a user supplies when opening an account."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Account name"
    )
    type: AccountType = Field(
        default=AccountType.CHECKING,
        description="Account kind"
    )
    initial_balance: JsonDecimal = Field(
        default=Decimal("0"),
        description="Opening balance (form logic keeps it non-negative)"
    )
    color: str = Field(
        default="#3B82F6",
        pattern=HEX_COLOR_PATTERN,
    )
    icon: Optional[str] = Field(
        default="🏛️",
        max_length=16,
    )


class Account(BaseModel):
    """
    A stored account.

    CRITICAL: `balance` is derived-but-stored. It is changed only by the
    ledger's balance primitive (or wholesale by import reconciliation),
    never recomputed from the transaction log during normal operation.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        default_factory=lambda: new_id("acc"),
        min_length=1,
        description="Unique account ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
    )
    type: AccountType = AccountType.OTHER
    balance: JsonDecimal = Field(
        default=Decimal("0"),
        description="Current balance"
    )
    color: str = Field(
        default="#3B82F6",
        pattern=HEX_COLOR_PATTERN,
    )
    icon: Optional[str] = Field(
        default=None,
        max_length=16,
    )


# =============================================================================
# TRANSACTION
# =============================================================================

class TransactionInput(BaseModel):
    """A transaction without an identity yet (what the form submits)."""
    model_config = ConfigDict(str_strip_whitespace=True)

    date: dt.date = Field(
        default_factory=dt.date.today,
        description="Booking date"
    )
    description: str = Field(
        default="",
        max_length=200,
    )
    amount: JsonDecimal = Field(
        ...,
        ge=0,
        description="Non-negative magnitude; the sign comes from `type`"
    )
    type: TransactionType
    category_id: str = Field(..., min_length=1)
    account_id: str = Field(..., min_length=1)
    notes: Optional[str] = Field(
        default=None,
        max_length=1000,
    )

    @property
    def signed_amount(self) -> Decimal:
        """+amount for income, -amount for expense."""
        if self.type is TransactionType.INCOME:
            return self.amount
        return -self.amount


class Transaction(TransactionInput):
    """A stored transaction."""

    id: str = Field(
        default_factory=lambda: new_id("trans"),
        min_length=1,
        description="Unique transaction ID"
    )


# =============================================================================
# DRAFT (assistant output)
# =============================================================================

class TransactionDraft(BaseModel):
    """
    A candidate transaction proposed by the drafting assistant.

    CRITICAL: This is UNTRUSTED data. It never reaches the ledger directly;
    the transaction form resolves names to ids and the user submits it.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = ""
    amount: Decimal = Decimal("0")
    type: TransactionType = TransactionType.EXPENSE
    category_name: Optional[str] = None
    date: dt.date = Field(default_factory=dt.date.today)
    account_name: Optional[str] = None

    @field_validator("description", mode="before")
    @classmethod
    def coerce_description(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> Decimal:
        """Non-numeric amounts become 0; negative amounts keep their magnitude."""
        if isinstance(v, bool) or v is None:
            return Decimal("0")
        try:
            amount = Decimal(str(v).strip())
        except (InvalidOperation, ValueError):
            return Decimal("0")
        if not amount.is_finite():
            return Decimal("0")
        return abs(amount)

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, v: Any) -> TransactionType:
        if isinstance(v, str) and v.strip().lower() in ("income", "ingreso"):
            return TransactionType.INCOME
        return TransactionType.EXPENSE

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> dt.date:
        """Malformed or missing dates fall back to today."""
        if isinstance(v, dt.datetime):
            return v.date()
        if isinstance(v, dt.date):
            return v
        if isinstance(v, str):
            try:
                return dt.date.fromisoformat(v.strip())
            except ValueError:
                pass
        return dt.date.today()


class TransactionFormValues(BaseModel):
    """
    What the transaction form currently holds.

    Ids may still be empty (nothing selected yet) and the amount may be
    zero; the form validator decides whether it can be submitted.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = ""
    amount: Decimal = Decimal("0")
    type: TransactionType = TransactionType.EXPENSE
    category_id: str = ""
    account_id: str = ""
    date: dt.date = Field(default_factory=dt.date.today)
    notes: Optional[str] = None

    def to_input(self) -> TransactionInput:
        """Raises pydantic.ValidationError if the values are incomplete."""
        return TransactionInput(
            date=self.date,
            description=self.description,
            amount=self.amount,
            type=self.type,
            category_id=self.category_id,
            account_id=self.account_id,
            notes=self.notes or None,
        )


# =============================================================================
# LEDGER OUTCOMES
# =============================================================================

class LedgerErrorKind(str, Enum):
    """Why a ledger operation was rejected."""
    INSUFFICIENT_FUNDS = "insufficient_funds"
    NEGATIVE_BALANCE = "negative_balance"
    TRANSACTION_NOT_FOUND = "transaction_not_found"
    ACCOUNT_NOT_FOUND = "account_not_found"
    CATEGORY_NOT_FOUND = "category_not_found"
    IN_USE = "in_use"


class LedgerOutcome(BaseModel):
    """
    Result of a ledger operation.

    A rejected outcome guarantees that nothing was mutated or persisted.
    `message` is user-facing (Spanish, like the rest of the UI).
    """

    success: bool
    error: Optional[LedgerErrorKind] = None
    message: str = ""

    transaction: Optional[Transaction] = None
    account: Optional[Account] = None
    category: Optional[Category] = None

    @classmethod
    def accepted(cls, message: str = "", **entities: Any) -> "LedgerOutcome":
        return cls(success=True, message=message, **entities)

    @classmethod
    def rejected(cls, error: LedgerErrorKind, message: str) -> "LedgerOutcome":
        return cls(success=False, error=error, message=message)


# =============================================================================
# PERSISTED STATE
# =============================================================================

class LedgerState(BaseModel):
    """The full entity store as loaded from / written to the key-value store."""

    transactions: list[Transaction] = Field(default_factory=list)
    accounts: list[Account] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    theme: Theme = Theme.LIGHT
