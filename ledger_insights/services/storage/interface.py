"""
Abstract Storage Interface

DESIGN DECISION: We define abstract interfaces for the stores the
analysis pipeline reads from. This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Keep the analysis logic decoupled from storage implementation

The ledger interface offers three ways to read records because the
ledger accessor falls back from one to the next when a query fails.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from ledger_insights.models.audit import AuditEvent
from ledger_insights.models.ledger import LedgerKind, LedgerRecord, Profile


class LedgerStoreInterface(ABC):
    """
    Read access to income and expense records.

    Every method must accept both LedgerKind.INCOME and LedgerKind.EXPENSE.
    """

    @abstractmethod
    async def query_by_user_and_range(
        self,
        user_id: str,
        kind: LedgerKind,
        start: date,
        end: date,
    ) -> list[LedgerRecord]:
        """
        Records of one kind for a user dated within [start, end].

        Raises:
            DataSourceError: If the query fails
        """
        pass

    @abstractmethod
    async def query_all_by_user(
        self,
        user_id: str,
        kind: LedgerKind,
    ) -> list[LedgerRecord]:
        """
        Every record of one kind for a user, newest first.

        Raises:
            DataSourceError: If the query fails
        """
        pass

    @abstractmethod
    async def query_latest(
        self,
        user_id: str,
        kind: LedgerKind,
        limit: int,
    ) -> list[LedgerRecord]:
        """
        The `limit` most recent records of one kind, regardless of date.

        Raises:
            DataSourceError: If the query fails
        """
        pass


class ProfileStoreInterface(ABC):
    """Read access to user profiles."""

    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[Profile]:
        """
        Look up a profile.

        Returns:
            The profile if found, None otherwise
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class DataSourceError(StorageError):
    """A ledger query failed (schema drift, index issues, backend down)."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
