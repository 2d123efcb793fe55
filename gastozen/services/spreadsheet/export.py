"""
Backup Export

Flattens the ledger state into the three backup sheets. The layout is
the one the import reconciler reads back, so an exported file can be
re-imported as-is.
"""

import datetime as dt
from decimal import Decimal
from typing import Any, Optional

from gastozen.models import LedgerState
from gastozen.services.spreadsheet.codec import (
    ACCOUNTS_SHEET,
    CATEGORIES_SHEET,
    TRANSACTIONS_SHEET,
)


UNKNOWN_NAME = "N/A"


def _number(value: Decimal) -> int | float:
    """Spreadsheet cells hold plain numbers."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def build_export_sheets(state: LedgerState) -> dict[str, list[dict[str, Any]]]:
    account_names = {a.id: a.name for a in state.accounts}
    category_names = {c.id: c.name for c in state.categories}

    transactions = [
        {
            "ID_Transaccion": t.id,
            "Fecha": t.date.isoformat(),
            "Descripcion": t.description,
            "Monto": _number(t.amount),
            "Tipo": t.type.label,
            "ID_Categoria": t.category_id,
            "Nombre_Categoria": category_names.get(t.category_id, UNKNOWN_NAME),
            "ID_Cuenta": t.account_id,
            "Nombre_Cuenta": account_names.get(t.account_id, UNKNOWN_NAME),
            "Notas": t.notes or "",
        }
        for t in state.transactions
    ]

    accounts = [
        {
            "ID_Cuenta": a.id,
            "Nombre": a.name,
            "Tipo_Cuenta": a.type.value,
            "Saldo": _number(max(Decimal("0"), a.balance)),
            "Color": a.color,
            "Icono": a.icon or "",
        }
        for a in state.accounts
    ]

    categories = [
        {
            "ID_Categoria": c.id,
            "Nombre": c.name,
            "Color": c.color,
            "Tipo_Categoria": c.type.label,
            "Icono": c.icon or "",
        }
        for c in state.categories
    ]

    return {
        TRANSACTIONS_SHEET: transactions,
        ACCOUNTS_SHEET: accounts,
        CATEGORIES_SHEET: categories,
    }


def export_filename(today: Optional[dt.date] = None) -> str:
    return f"gastozen_backup_{(today or dt.date.today()).isoformat()}.xlsx"
