"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the ledger backend because:
1. Non-technical users can view and edit their ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- Limited query capabilities (we filter in Python)
- gspread is synchronous, so every sheet call runs in a worker thread

Incomes and expenses live in separate worksheets with the same columns.
The implementation follows the abstract interface, so we can swap
to PostgreSQL/SQLite later without changing the analysis logic.
"""

import asyncio
import json
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from ledger_insights.config import GoogleSheetsSettings, get_settings
from ledger_insights.models.audit import AuditEvent, AuditEventType, AuditSeverity
from ledger_insights.models.ledger import LedgerKind, LedgerRecord, Profile
from ledger_insights.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    DataSourceError,
    LedgerStoreInterface,
    ProfileStoreInterface,
    StorageError,
)
from ledger_insights.services.storage.memory import newest_first


logger = structlog.get_logger(__name__)


# Column mappings for the Incomes and Expenses sheets
LEDGER_COLUMNS = [
    "id",
    "user_id",
    "name",
    "category_id",
    "category_name",
    "amount",
    "occurred_on",
    "created_at",
    "updated_at",
]

PROFILE_COLUMNS = [
    "id",
    "full_name",
    "email",
]

AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "user_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
]


def _cell(row: list, index: int) -> str:
    """Cell value, or "" for short rows."""
    try:
        return row[index].strip() if row[index] else ""
    except IndexError:
        return ""


def _parse_decimal(value: str) -> Optional[Decimal]:
    if not value:
        return None
    try:
        return Decimal(value.replace(",", ""))
    except InvalidOperation:
        return None


def _parse_date(value: str) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for connecting.
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
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_sheet(self, title: str, columns: list[str], rows: int = 1000) -> gspread.Worksheet:
        """Get or create a worksheet with the given header row."""
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

    def get_ledger_sheet(self, kind: LedgerKind) -> gspread.Worksheet:
        title = (
            self._settings.incomes_sheet_name
            if kind == LedgerKind.INCOME
            else self._settings.expenses_sheet_name
        )
        return self.get_sheet(title, LEDGER_COLUMNS)

    def get_profiles_sheet(self) -> gspread.Worksheet:
        return self.get_sheet(self._settings.profiles_sheet_name, PROFILE_COLUMNS)

    def get_audit_sheet(self) -> gspread.Worksheet:
        return self.get_sheet(self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000)


class GoogleSheetsLedgerStore(LedgerStoreInterface):
    """
    Google Sheets implementation of the ledger store.

    One record per row. Rows that cannot be parsed are skipped,
    not fatal: one bad row must not hide a user's whole ledger.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_record(self, row: list, kind: LedgerKind) -> LedgerRecord:
        """Convert a spreadsheet row to a LedgerRecord."""
        created_at = _cell(row, 7)
        updated_at = _cell(row, 8)
        return LedgerRecord(
            id=_cell(row, 0),
            user_id=_cell(row, 1),
            kind=kind,
            name=_cell(row, 2) or None,
            category_id=_cell(row, 3) or None,
            category_name=_cell(row, 4) or None,
            amount=_parse_decimal(_cell(row, 5)),
            occurred_on=_parse_date(_cell(row, 6)),
            created_at=datetime.fromisoformat(created_at) if created_at else datetime.utcnow(),
            updated_at=datetime.fromisoformat(updated_at) if updated_at else datetime.utcnow(),
        )

    def _load(self, user_id: str, kind: LedgerKind) -> list[LedgerRecord]:
        try:
            sheet = self._client.get_ledger_sheet(kind)
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except StorageError as e:
            raise DataSourceError(str(e)) from e
        except Exception as e:
            raise DataSourceError(f"Failed to read {kind.value} sheet: {e}") from e

        records = []
        for row in all_rows:
            if not row or _cell(row, 1) != user_id:
                continue
            try:
                records.append(self._row_to_record(row, kind))
            except Exception as e:
                logger.debug("ledger_row_skipped", row_id=_cell(row, 0), error=str(e))
                continue
        return records

    async def query_by_user_and_range(
        self,
        user_id: str,
        kind: LedgerKind,
        start: date,
        end: date,
    ) -> list[LedgerRecord]:
        records = await asyncio.to_thread(self._load, user_id, kind)
        return newest_first(
            r for r in records
            if r.occurred_on is not None and start <= r.occurred_on <= end
        )

    async def query_all_by_user(
        self,
        user_id: str,
        kind: LedgerKind,
    ) -> list[LedgerRecord]:
        return newest_first(await asyncio.to_thread(self._load, user_id, kind))

    async def query_latest(
        self,
        user_id: str,
        kind: LedgerKind,
        limit: int,
    ) -> list[LedgerRecord]:
        records = await asyncio.to_thread(self._load, user_id, kind)
        return newest_first(records)[:limit]


class GoogleSheetsProfileStore(ProfileStoreInterface):
    """Google Sheets implementation of the profile store."""

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _read_rows(self) -> list:
        sheet = self._client.get_profiles_sheet()
        return sheet.get_all_values()[1:]

    async def get_by_id(self, user_id: str) -> Optional[Profile]:
        try:
            all_rows = await asyncio.to_thread(self._read_rows)
        except Exception as e:
            raise StorageError(f"Failed to get profile: {e}") from e

        for row in all_rows:
            if row and _cell(row, 0) == user_id:
                return Profile(
                    id=user_id,
                    full_name=_cell(row, 1) or None,
                    email=_cell(row, 2) or None,
                )
        return None


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        return AuditEvent(
            event_id=UUID(_cell(row, 0)),
            timestamp=datetime.fromisoformat(_cell(row, 1)),
            event_type=AuditEventType(_cell(row, 2)),
            severity=AuditSeverity(_cell(row, 3)),
            user_id=_cell(row, 4) or None,
            correlation_id=UUID(_cell(row, 5)) if _cell(row, 5) else None,
            description=_cell(row, 6),
            details=json.loads(_cell(row, 7)) if _cell(row, 7) else {},
            error_message=_cell(row, 8) or None,
        )

    def _append_row(self, row: list) -> None:
        sheet = self._client.get_audit_sheet()
        sheet.append_row(row, value_input_option="RAW")

    def _read_rows(self) -> list:
        sheet = self._client.get_audit_sheet()
        return sheet.get_all_values()[1:]

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            await asyncio.to_thread(self._append_row, event.to_sheets_row())
            return True
        except Exception as e:
            raise StorageError(f"Failed to write audit event: {e}") from e

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get recent events."""
        try:
            all_rows = await asyncio.to_thread(self._read_rows)
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}") from e

        events = []
        for row in all_rows:
            if row and row[0]:
                try:
                    events.append(self._row_to_event(row))
                except Exception:
                    continue

        # Sort newest first
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
