"""
Default Data

Seed categories and accounts used when the store holds nothing yet.
The fallback categories for spreadsheet import are looked up by the
names "Gasto Diverso" and "Otro Ingreso", so both must stay here.
"""

from decimal import Decimal

from gastozen.models.ledger import Account, AccountType, Category, TransactionType


MISC_EXPENSE_CATEGORY_NAME = "Gasto Diverso"
OTHER_INCOME_CATEGORY_NAME = "Otro Ingreso"

_EXPENSE = TransactionType.EXPENSE
_INCOME = TransactionType.INCOME

_CATEGORY_ROWS = [
    ("cat-food", "Alimentación", "#EF4444", _EXPENSE, "🍔"),
    ("cat-groceries", "Supermercado", "#F97316", _EXPENSE, "🛒"),
    ("cat-transport", "Transporte", "#F59E0B", _EXPENSE, "🚗"),
    ("cat-utilities", "Servicios", "#EAB308", _EXPENSE, "💡"),
    ("cat-housing", "Vivienda", "#84CC16", _EXPENSE, "🏠"),
    ("cat-health", "Salud", "#22C55E", _EXPENSE, "🏥"),
    ("cat-entertainment", "Entretenimiento", "#10B981", _EXPENSE, "🎬"),
    ("cat-shopping", "Compras", "#06B6D4", _EXPENSE, "🛍️"),
    ("cat-personal", "Cuidado Personal", "#0EA5E9", _EXPENSE, "🧴"),
    ("cat-education", "Educación", "#3B82F6", _EXPENSE, "📚"),
    ("cat-gifts", "Regalos/Donaciones", "#6366F1", _EXPENSE, "🎁"),
    ("cat-travel", "Viajes", "#8B5CF6", _EXPENSE, "✈️"),
    ("cat-misc-expense", MISC_EXPENSE_CATEGORY_NAME, "#A855F7", _EXPENSE, "📎"),
    ("cat-salary", "Salario", "#16A34A", _INCOME, "💰"),
    ("cat-freelance", "Freelance/Bonos", "#059669", _INCOME, "💼"),
    ("cat-investments", "Inversiones", "#047857", _INCOME, "📈"),
    ("cat-other-income", OTHER_INCOME_CATEGORY_NAME, "#065F46", _INCOME, "🪙"),
]

_ACCOUNT_ROWS = [
    ("acc-checking", "Cuenta Principal", AccountType.CHECKING, "1000", "#3B82F6", "🏛️"),
    ("acc-savings", "Cuenta de Ahorros", AccountType.SAVINGS, "5000", "#22C55E", "🐷"),
    ("acc-credit", "Tarjeta de Crédito", AccountType.CREDIT_CARD, "0", "#EF4444", "💳"),
    ("acc-cash", "Efectivo", AccountType.CASH, "150", "#F97316", "💵"),
]


def default_categories() -> list[Category]:
    """Fresh copies of the seed categories."""
    return [
        Category(id=cid, name=name, color=color, type=kind, icon=icon)
        for cid, name, color, kind, icon in _CATEGORY_ROWS
    ]


def default_accounts() -> list[Account]:
    """Fresh copies of the seed accounts."""
    return [
        Account(id=aid, name=name, type=kind, balance=Decimal(balance), color=color, icon=icon)
        for aid, name, kind, balance, color, icon in _ACCOUNT_ROWS
    ]
