"""Services package."""

from ledger_insights.services.llm import (
    ConfigurationError,
    ConnectivityError,
    GeminiInsightProvider,
    InsightProvider,
    InsightProviderError,
    ProviderError,
)
from ledger_insights.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    DataSourceError,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsLedgerStore,
    GoogleSheetsProfileStore,
    InMemoryAuditStorage,
    InMemoryLedgerStore,
    InMemoryProfileStore,
    LedgerStoreInterface,
    NotFoundError,
    ProfileStoreInterface,
    StorageError,
)

__all__ = [
    # Insight provider
    "ConfigurationError",
    "ConnectivityError",
    "GeminiInsightProvider",
    "InsightProvider",
    "InsightProviderError",
    "ProviderError",
    # Storage services
    "AuditStorageInterface",
    "ConnectionError",
    "DataSourceError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStore",
    "GoogleSheetsProfileStore",
    "InMemoryAuditStorage",
    "InMemoryLedgerStore",
    "InMemoryProfileStore",
    "LedgerStoreInterface",
    "NotFoundError",
    "ProfileStoreInterface",
    "StorageError",
]
