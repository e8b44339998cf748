"""Generative insight provider package."""

from ledger_insights.services.llm.provider import (
    ConfigurationError,
    ConnectivityError,
    InsightProvider,
    InsightProviderError,
    ProviderError,
    ProviderSession,
)
from ledger_insights.services.llm.gemini import (
    GeminiInsightProvider,
    GeminiSession,
)

__all__ = [
    "ConfigurationError",
    "ConnectivityError",
    "InsightProvider",
    "InsightProviderError",
    "ProviderError",
    "ProviderSession",
    "GeminiInsightProvider",
    "GeminiSession",
]
