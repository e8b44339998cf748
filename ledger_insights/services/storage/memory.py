"""
In-Memory Storage Implementation

Used by the test suite and by the app when Google Sheets is not
configured. Behaves like the Sheets backend: filtering and sorting
happen in Python over a plain list.
"""

from datetime import date
from typing import Iterable, Optional

from ledger_insights.models.audit import AuditEvent
from ledger_insights.models.ledger import LedgerKind, LedgerRecord, Profile
from ledger_insights.services.storage.interface import (
    AuditStorageInterface,
    LedgerStoreInterface,
    ProfileStoreInterface,
)


def newest_first(records: Iterable[LedgerRecord]) -> list[LedgerRecord]:
    """Sort records by date descending; undated records go last."""
    return sorted(
        records,
        key=lambda r: (r.occurred_on is not None, r.occurred_on or date.min),
        reverse=True,
    )


class InMemoryLedgerStore(LedgerStoreInterface):
    """Ledger store backed by a list of records."""

    def __init__(self, records: Optional[Iterable[LedgerRecord]] = None):
        self._records: list[LedgerRecord] = list(records or [])

    def add(self, record: LedgerRecord) -> None:
        self._records.append(record)

    def _for_user(self, user_id: str, kind: LedgerKind) -> list[LedgerRecord]:
        return [
            r for r in self._records
            if r.user_id == user_id and r.kind == kind
        ]

    async def query_by_user_and_range(
        self,
        user_id: str,
        kind: LedgerKind,
        start: date,
        end: date,
    ) -> list[LedgerRecord]:
        return newest_first(
            r for r in self._for_user(user_id, kind)
            if r.occurred_on is not None and start <= r.occurred_on <= end
        )

    async def query_all_by_user(
        self,
        user_id: str,
        kind: LedgerKind,
    ) -> list[LedgerRecord]:
        return newest_first(self._for_user(user_id, kind))

    async def query_latest(
        self,
        user_id: str,
        kind: LedgerKind,
        limit: int,
    ) -> list[LedgerRecord]:
        return newest_first(self._for_user(user_id, kind))[:limit]


class InMemoryProfileStore(ProfileStoreInterface):
    """Profile store backed by a dict keyed on profile id."""

    def __init__(self, profiles: Optional[Iterable[Profile]] = None):
        self._profiles = {p.id: p for p in profiles or []}

    def add(self, profile: Profile) -> None:
        self._profiles[profile.id] = profile

    async def get_by_id(self, user_id: str) -> Optional[Profile]:
        return self._profiles.get(user_id)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log kept in memory."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return sorted(self.events, key=lambda e: e.timestamp, reverse=True)[:limit]
