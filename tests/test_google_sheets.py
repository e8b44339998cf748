"""Tests for the Google Sheets stores against an in-process fake spreadsheet."""

import threading

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from ledger_insights.models.audit import AuditEventBuilder
from ledger_insights.models.ledger import LedgerKind
from ledger_insights.services.storage import (
    DataSourceError,
    GoogleSheetsAuditStorage,
    GoogleSheetsLedgerStore,
    GoogleSheetsProfileStore,
    StorageError,
)
from ledger_insights.services.storage.google_sheets import LEDGER_COLUMNS, PROFILE_COLUMNS
from tests.fakes import USER_ID


class FakeWorksheet:
    """Worksheet that records which thread read or wrote it."""

    def __init__(self, rows, error=None):
        self.rows = [list(r) for r in rows]
        self.error = error
        self.threads: list[int] = []

    def get_all_values(self):
        self.threads.append(threading.get_ident())
        if self.error:
            raise self.error
        return self.rows

    def append_row(self, row, value_input_option=None):
        self.threads.append(threading.get_ident())
        if self.error:
            raise self.error
        self.rows.append(row)


class FakeSheetsClient:
    def __init__(self, incomes=None, expenses=None, profiles=None, audit=None):
        self.ledger = {
            LedgerKind.INCOME: incomes or FakeWorksheet([LEDGER_COLUMNS]),
            LedgerKind.EXPENSE: expenses or FakeWorksheet([LEDGER_COLUMNS]),
        }
        self.profiles = profiles or FakeWorksheet([PROFILE_COLUMNS])
        self.audit = audit or FakeWorksheet([])

    def get_ledger_sheet(self, kind):
        return self.ledger[kind]

    def get_profiles_sheet(self):
        return self.profiles

    def get_audit_sheet(self):
        return self.audit


def _row(id, user_id, amount, occurred_on, category="", created_at=""):
    return [id, user_id, "Item", "", category, amount, occurred_on, created_at, ""]


@pytest.fixture
def expenses_sheet():
    return FakeWorksheet([
        LEDGER_COLUMNS,
        _row("e1", USER_ID, "1,200.50", "2025-02-10", category="Rent"),
        _row("e2", USER_ID, "300", "2025-03-01T09:30:00"),
        _row("e3", "someone-else", "999", "2025-03-02"),
        # Negative amount, not a valid record
        _row("e4", USER_ID, "-5", "2025-03-03"),
        # Unparseable timestamp
        _row("e5", USER_ID, "10", "2025-03-04", created_at="yesterday"),
        # Missing amount and date are kept
        _row("e6", USER_ID, "", ""),
        [],
    ])


class TestGoogleSheetsLedgerStore:

    @pytest.mark.asyncio
    async def test_filters_by_user_and_skips_malformed_rows(self, expenses_sheet):
        store = GoogleSheetsLedgerStore(FakeSheetsClient(expenses=expenses_sheet))

        records = await store.query_all_by_user(USER_ID, LedgerKind.EXPENSE)

        assert [r.id for r in records] == ["e2", "e1", "e6"]
        assert records[1].amount == Decimal("1200.50")
        assert records[1].category_label == "Rent"
        assert records[0].occurred_on == date(2025, 3, 1)
        assert records[2].amount is None

    @pytest.mark.asyncio
    async def test_range_and_latest(self, expenses_sheet):
        store = GoogleSheetsLedgerStore(FakeSheetsClient(expenses=expenses_sheet))

        in_range = await store.query_by_user_and_range(
            USER_ID, LedgerKind.EXPENSE, date(2025, 3, 1), date(2025, 3, 31)
        )
        latest = await store.query_latest(USER_ID, LedgerKind.EXPENSE, 1)

        assert [r.id for r in in_range] == ["e2"]
        assert [r.id for r in latest] == ["e2"]

    @pytest.mark.asyncio
    async def test_sheet_is_read_off_the_event_loop(self, expenses_sheet):
        store = GoogleSheetsLedgerStore(FakeSheetsClient(expenses=expenses_sheet))

        await store.query_all_by_user(USER_ID, LedgerKind.EXPENSE)

        assert expenses_sheet.threads
        assert threading.get_ident() not in expenses_sheet.threads

    @pytest.mark.asyncio
    async def test_read_failure_is_a_data_source_error(self):
        broken = FakeWorksheet([], error=RuntimeError("quota exceeded"))
        store = GoogleSheetsLedgerStore(FakeSheetsClient(incomes=broken))

        with pytest.raises(DataSourceError, match="quota exceeded"):
            await store.query_all_by_user(USER_ID, LedgerKind.INCOME)


class TestGoogleSheetsProfileStore:

    @pytest.mark.asyncio
    async def test_get_by_id(self):
        sheet = FakeWorksheet([PROFILE_COLUMNS, [USER_ID, "Asha Rao", "asha@example.com"]])
        store = GoogleSheetsProfileStore(FakeSheetsClient(profiles=sheet))

        profile = await store.get_by_id(USER_ID)

        assert profile.display_name == "Asha Rao"
        assert await store.get_by_id("nobody") is None
        assert threading.get_ident() not in sheet.threads

    @pytest.mark.asyncio
    async def test_read_failure_is_a_storage_error(self):
        broken = FakeWorksheet([], error=RuntimeError("network down"))
        store = GoogleSheetsProfileStore(FakeSheetsClient(profiles=broken))

        with pytest.raises(StorageError, match="network down"):
            await store.get_by_id(USER_ID)


class TestGoogleSheetsAuditStorage:

    @pytest.mark.asyncio
    async def test_append_and_read_back(self):
        sheet = FakeWorksheet([])
        storage = GoogleSheetsAuditStorage(FakeSheetsClient(audit=sheet))
        event = AuditEventBuilder.fallback_used(USER_ID, "not configured", uuid4())

        assert await storage.append_event(event) is True
        # Header row is skipped on read
        sheet.rows.insert(0, ["event_id"])
        events = await storage.get_recent_events()

        assert [e.event_id for e in events] == [event.event_id]
        assert events[0].error_message == "not configured"
        assert threading.get_ident() not in sheet.threads
