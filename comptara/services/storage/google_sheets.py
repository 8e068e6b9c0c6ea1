"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets can serve as the hosted record service because:
1. Non-technical users can view their books directly in Sheets
2. No database setup required
3. Rows are naturally append-only, matching the collections' contract

TRADEOFFS:
- Not suitable for high-volume data (fine for a personal ledger)
- No server-side filtering (we filter in Python)
- gspread is synchronous; calls are pushed to a worker thread

The implementation follows the abstract interface, so the sync engine
and the data access facade never know which backend they talk to.
"""

import asyncio
from typing import Optional
from uuid import uuid4

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from comptara.config import GoogleSheetsSettings, get_settings
from comptara.models.audit import AuditEvent
from comptara.models.ledger import ENTRIES_COLLECTION, PAYMENTS_COLLECTION, utcnow
from comptara.services.storage.interface import (
    AuditStorageInterface,
    RemoteDataService,
    RemoteReadFailed,
    RemoteWriteFailed,
    StorageConnectionError,
)


logger = structlog.get_logger(__name__)


# Column mappings for the accounting_entries sheet
ENTRY_COLUMNS = [
    "id",
    "user_id",
    "wallet_address",
    "date",
    "libelle",
    "debit",
    "credit",
    "montant",
    "devise",
    "tx_hash",
    "description",
    "category",
    "created_at",
    "updated_at",
]

# Column mappings for the payments sheet
PAYMENT_COLUMNS = [
    "id",
    "user_id",
    "wallet_address",
    "type",
    "destinataire",
    "montant",
    "devise",
    "objet",
    "tx_hash",
    "status",
    "created_at",
]

# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "user_id",
    "description",
    "details_json",
    "error_message",
]

COLLECTION_COLUMNS = {
    ENTRIES_COLLECTION: ENTRY_COLUMNS,
    PAYMENTS_COLLECTION: PAYMENT_COLUMNS,
}

# Optional columns read back as None when their cell is empty
NULLABLE_COLUMNS = {"user_id", "description", "category"}


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @property
    def settings(self) -> GoogleSheetsSettings:
        return self._settings

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
                raise StorageConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(self._settings.spreadsheet_id)
            except gspread.SpreadsheetNotFound:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_worksheet(self, title: str, columns: list[str], rows: int = 1000) -> gspread.Worksheet:
        """Get or create a worksheet whose first row holds the column names."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_collection_sheet(self, collection: str) -> gspread.Worksheet:
        """Worksheet backing one record collection."""
        if collection == ENTRIES_COLLECTION:
            title = self._settings.entries_sheet_name
        elif collection == PAYMENTS_COLLECTION:
            title = self._settings.payments_sheet_name
        else:
            raise ValueError(f"Unknown collection: {collection}")
        return self.get_worksheet(title, COLLECTION_COLUMNS[collection])

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        return self.get_worksheet(
            self._settings.audit_sheet_name,
            AUDIT_COLUMNS,
            rows=5000,  # More rows for audit log
        )


def _cell(value) -> str:
    if value is None:
        return ""
    return str(value)


def row_to_cells(row: dict, columns: list[str]) -> list[str]:
    """Convert a record dict to cells in column order."""
    return [_cell(row.get(column)) for column in columns]


def cells_to_row(cells: list[str], header: list[str]) -> dict:
    """Convert a sheet row to a record dict keyed by the header row."""
    row = {}
    for idx, column in enumerate(header):
        value = cells[idx] if idx < len(cells) else ""
        row[column] = None if (value == "" and column in NULLABLE_COLUMNS) else value
    return row


class GoogleSheetsRemoteDataService(RemoteDataService):
    """
    Google Sheets implementation of the remote record service.

    Each collection is one worksheet; each record is one row.
    Ids are uuid4 strings and timestamps are ISO-8601 UTC.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _insert_sync(self, collection: str, row: dict) -> dict:
        sheet = self._client.get_collection_sheet(collection)
        now = utcnow().isoformat()
        stored = {**row, "id": str(uuid4()), "created_at": now}
        if collection == ENTRIES_COLLECTION:
            stored["updated_at"] = now
        columns = COLLECTION_COLUMNS[collection]
        sheet.append_row(row_to_cells(stored, columns), value_input_option="RAW")
        return cells_to_row(row_to_cells(stored, columns), columns)

    def _select_sync(self, collection: str, filters: dict[str, str]) -> list[dict]:
        sheet = self._client.get_collection_sheet(collection)
        all_rows = sheet.get_all_values()
        if not all_rows:
            return []

        header, body = all_rows[0], all_rows[1:]
        rows = []
        for cells in body:
            if not cells or not cells[0]:  # Skip empty rows
                continue
            row = cells_to_row(cells, header)
            if all(row.get(k) == v for k, v in filters.items()):
                rows.append(row)

        rows.sort(key=lambda r: r.get("created_at") or "", reverse=True)
        return rows

    async def insert(self, collection: str, row: dict) -> dict:
        """Append a record row to the collection's worksheet."""
        try:
            return await asyncio.to_thread(self._insert_sync, collection, row)
        except Exception as e:
            raise RemoteWriteFailed(f"Failed to insert into {collection}: {e}") from e

    async def select(
        self,
        collection: str,
        filters: Optional[dict[str, str]] = None,
    ) -> list[dict]:
        """Read and filter all rows of the collection's worksheet."""
        try:
            return await asyncio.to_thread(self._select_sync, collection, filters or {})
        except Exception as e:
            raise RemoteReadFailed(f"Failed to read {collection}: {e}") from e


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _append_sync(self, event: AuditEvent) -> None:
        sheet = self._client.get_audit_sheet()
        sheet.append_row(event.to_sheets_row(), value_input_option="RAW")

    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            await asyncio.to_thread(self._append_sync, event)
            return True
        except Exception as e:
            # Audit logging must not break the main flow
            logger.warning(
                "audit_sheet_write_failed",
                error=str(e),
                event_id=str(event.event_id),
            )
            return False
