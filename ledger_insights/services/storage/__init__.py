"""
Storage Services Package

Provides abstract interfaces and concrete implementations for the stores
the analysis pipeline reads from. Google Sheets is the production
backend; the in-memory stores back the tests and unconfigured installs.
"""

from ledger_insights.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    DataSourceError,
    LedgerStoreInterface,
    NotFoundError,
    ProfileStoreInterface,
    StorageError,
)
from ledger_insights.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryLedgerStore,
    InMemoryProfileStore,
)
from ledger_insights.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsLedgerStore,
    GoogleSheetsProfileStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerStoreInterface",
    "ProfileStoreInterface",
    # Exceptions
    "ConnectionError",
    "DataSourceError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryLedgerStore",
    "InMemoryProfileStore",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStore",
    "GoogleSheetsProfileStore",
]
