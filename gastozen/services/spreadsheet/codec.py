"""
Spreadsheet Codec

Reads and writes GastoZen backups as .xlsx workbooks with openpyxl.

A backup holds three sheets, each with a header row followed by one
entity per row. Reading returns every sheet as a list of row dicts
keyed by header, which is the shape the import reconciler consumes.
"""

import zipfile
from io import BytesIO
from typing import Any, Mapping, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException


TRANSACTIONS_SHEET = "Transacciones"
ACCOUNTS_SHEET = "Cuentas"
CATEGORIES_SHEET = "Categorías"

REQUIRED_SHEETS = (TRANSACTIONS_SHEET, ACCOUNTS_SHEET, CATEGORIES_SHEET)

TRANSACTION_COLUMNS = [
    "ID_Transaccion",
    "Fecha",
    "Descripcion",
    "Monto",
    "Tipo",
    "ID_Categoria",
    "Nombre_Categoria",
    "ID_Cuenta",
    "Nombre_Cuenta",
    "Notas",
]
ACCOUNT_COLUMNS = ["ID_Cuenta", "Nombre", "Tipo_Cuenta", "Saldo", "Color", "Icono"]
CATEGORY_COLUMNS = ["ID_Categoria", "Nombre", "Color", "Tipo_Categoria", "Icono"]

SHEET_COLUMNS = {
    TRANSACTIONS_SHEET: TRANSACTION_COLUMNS,
    ACCOUNTS_SHEET: ACCOUNT_COLUMNS,
    CATEGORIES_SHEET: CATEGORY_COLUMNS,
}


class SpreadsheetFormatError(Exception):
    """The file is not a readable GastoZen backup. The message is user-facing."""
    pass


def read_workbook(
    data: bytes,
    required_sheets: Sequence[str] = REQUIRED_SHEETS,
) -> dict[str, list[dict[str, Any]]]:
    """
    Decode an .xlsx file into {sheet name: [row dict, ...]}.

    Raises:
        SpreadsheetFormatError: If the bytes are not a workbook, or a
            required sheet is missing
    """
    try:
        wb = load_workbook(BytesIO(data), data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as e:
        raise SpreadsheetFormatError(
            "No se pudo leer el archivo. Asegúrate de que sea un respaldo "
            f"válido de GastoZen en formato .xlsx ({e})."
        )

    missing = [name for name in required_sheets if name not in wb.sheetnames]
    if missing:
        raise SpreadsheetFormatError(
            "El archivo Excel no contiene las hojas esperadas "
            f"({', '.join(required_sheets)}). Faltan: {', '.join(missing)}."
        )

    sheets: dict[str, list[dict[str, Any]]] = {}
    for name in required_sheets:
        ws = wb[name]
        rows = ws.iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            sheets[name] = []
            continue
        columns = [str(c).strip() if c is not None else "" for c in header]

        records = []
        for row in rows:
            if all(cell is None or cell == "" for cell in row):
                continue
            records.append({
                column: value
                for column, value in zip(columns, row)
                if column
            })
        sheets[name] = records
    return sheets


def write_workbook(sheets: Mapping[str, Sequence[Mapping[str, Any]]]) -> bytes:
    """
    Encode {sheet name: [row dict, ...]} as .xlsx bytes.

    Columns come from SHEET_COLUMNS for known sheets, else from the
    keys of the first row.
    """
    wb = Workbook()
    wb.remove(wb.active)

    for name, records in sheets.items():
        ws = wb.create_sheet(name)
        columns = SHEET_COLUMNS.get(name) or (list(records[0].keys()) if records else [])
        ws.append(columns)
        for cell in ws[1]:
            cell.font = Font(bold=True)
        for record in records:
            ws.append([record.get(column) for column in columns])
        for index, column in enumerate(columns, start=1):
            ws.column_dimensions[get_column_letter(index)].width = max(12, len(column) + 4)

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
