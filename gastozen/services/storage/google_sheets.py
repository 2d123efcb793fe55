"""
Google Sheets Storage Implementation

The ledger state lives in a single two-column worksheet: column A holds
the key, the remaining columns hold the JSON value. Sheets caps a cell
at 50,000 characters, so long values are split across as many cells of
the row as they need.

Every write rewrites the whole table with ONE range update. That is the
only atomic primitive the Sheets API offers, and it is what lets
`set_many` satisfy the storage contract.
"""

from typing import Iterable, Mapping, Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from gastozen.config import GoogleSheetsSettings, get_settings
from gastozen.services.storage.interface import (
    ConnectionError,
    KeyValueStoreInterface,
    NotFoundError,
    StorageError,
)


STATE_HEADER = ["key", "value"]

# Leaves headroom under the 50,000 character cell limit
CELL_CHUNK_SIZE = 45000


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise NotFoundError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_state_sheet(self) -> gspread.Worksheet:
        """Get or create the state worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.state_sheet_name)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=self._settings.state_sheet_name,
                rows=100,
                cols=len(STATE_HEADER),
            )
            sheet.append_row(STATE_HEADER)
        return sheet


def _split_value(value: str) -> list[str]:
    if not value:
        return [""]
    return [value[i:i + CELL_CHUNK_SIZE] for i in range(0, len(value), CELL_CHUNK_SIZE)]


class GoogleSheetsStore(KeyValueStoreInterface):
    """
    Google Sheets implementation of the key-value store.

    One key per row; the value may span several cells of its row.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _read_table(self) -> tuple[gspread.Worksheet, dict[str, str], tuple[int, int]]:
        """Returns the sheet, its key/value pairs and the (rows, cols) it spans."""
        sheet = self._client.get_state_sheet()
        all_rows = sheet.get_all_values()
        values: dict[str, str] = {}
        for row in all_rows[1:]:  # Skip header
            if not row or not row[0]:
                continue
            values[row[0]] = "".join(row[1:])
        width = max([0] + [len(row) for row in all_rows])
        return sheet, values, (len(all_rows), width)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _write_table(
        self,
        sheet: gspread.Worksheet,
        values: dict[str, str],
        previous_shape: tuple[int, int],
    ) -> None:
        previous_row_count, previous_width = previous_shape
        rows = [[key, *_split_value(value)] for key, value in values.items()]
        # Blank out cells left over from a wider or longer previous table
        width = max([len(STATE_HEADER), previous_width] + [len(row) for row in rows])
        table = [STATE_HEADER + [""] * (width - len(STATE_HEADER))]
        table += [row + [""] * (width - len(row)) for row in rows]
        while len(table) < previous_row_count:
            table.append([""] * width)

        if sheet.col_count < width:
            sheet.add_cols(width - sheet.col_count)
        if sheet.row_count < len(table):
            sheet.add_rows(len(table) - sheet.row_count)
        sheet.update(values=table, range_name="A1", value_input_option="RAW")

    def get(self, key: str) -> Optional[str]:
        try:
            _, values, _ = self._read_table()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read state key '{key}': {e}")
        return values.get(key)

    def set_many(self, values: Mapping[str, str]) -> None:
        try:
            sheet, current, shape = self._read_table()
            current.update(values)
            self._write_table(sheet, current, shape)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write state: {e}")

    def delete_many(self, keys: Iterable[str]) -> None:
        doomed = set(keys)
        try:
            sheet, current, shape = self._read_table()
            remaining = {k: v for k, v in current.items() if k not in doomed}
            if len(remaining) != len(current):
                self._write_table(sheet, remaining, shape)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete state keys: {e}")
