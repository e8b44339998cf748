"""
Data Models Package

This package contains all Pydantic models used in Ledger Insights.
All data flowing through the analysis pipeline must conform to these schemas.
"""

from ledger_insights.models.ledger import (
    UNCATEGORIZED,
    FinancialSummary,
    LedgerKind,
    LedgerRecord,
    Profile,
    TopExpense,
)
from ledger_insights.models.insight import (
    AlertSeverity,
    AnalysisResponse,
    CategoryAnalysis,
    Forecast,
    InsightProvenance,
    InsightResult,
    MonthlyAnalysis,
    Priority,
    Recommendation,
    RiskAlert,
)
from ledger_insights.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "UNCATEGORIZED",
    "FinancialSummary",
    "LedgerKind",
    "LedgerRecord",
    "Profile",
    "TopExpense",
    # Insight models
    "AlertSeverity",
    "AnalysisResponse",
    "CategoryAnalysis",
    "Forecast",
    "InsightProvenance",
    "InsightResult",
    "MonthlyAnalysis",
    "Priority",
    "Recommendation",
    "RiskAlert",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
