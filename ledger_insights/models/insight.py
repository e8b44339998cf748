"""
Insight Models for Ledger Insights

An InsightResult is produced in one of three ways:
1. Parsed from the Gemini response (provenance: ai)
2. Recovered from an unparseable Gemini response (provenance: degraded)
3. Computed by the rule-based fallback analyzer (provenance: fallback)

CRITICAL: All three share exactly the same shape.
The provenance tag stays inside Python and is excluded from
serialization, so API consumers never branch on where advice came from.
They learn about degradation from AnalysisResponse.success instead.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ledger_insights.models.ledger import FinancialSummary


class InsightProvenance(str, Enum):
    """Where an InsightResult came from."""
    AI = "ai"
    DEGRADED = "degraded"
    FALLBACK = "fallback"


class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class AlertSeverity(str, Enum):
    WARNING = "Warning"
    DANGER = "Danger"
    INFO = "Info"


class InsightModel(BaseModel):
    """Base for insight models: snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class MonthlyAnalysis(InsightModel):
    best_month: Optional[str] = None
    worst_month: Optional[str] = None
    trend: Optional[str] = Field(
        default=None,
        description="Increasing, Decreasing or Stable"
    )


class CategoryAnalysis(InsightModel):
    top_spending_category: Optional[str] = None
    recommended_category_to_reduce: Optional[str] = None
    savings_opportunity: Optional[Decimal] = None


class Recommendation(InsightModel):
    title: str
    description: str
    priority: Priority


class RiskAlert(InsightModel):
    type: str
    message: str
    severity: AlertSeverity


class Forecast(InsightModel):
    expected_income: Decimal
    expected_expenses: Decimal
    expected_savings: Decimal


class InsightResult(InsightModel):
    """
    Structured financial advice.

    Every field is optional so that the last-resort fallback can return
    a result carrying nothing but an error description. Normal results
    always fill overall_assessment and financial_health_score.
    """

    overall_assessment: Optional[str] = None
    financial_health_score: Optional[int] = Field(
        default=None,
        ge=0,
        le=100,
    )
    key_insights: list[str] = Field(default_factory=list)
    monthly_analysis: Optional[MonthlyAnalysis] = None
    category_analysis: Optional[CategoryAnalysis] = None
    recommendations: list[Recommendation] = Field(default_factory=list)
    risk_alerts: list[RiskAlert] = Field(default_factory=list)
    predicted_savings: Optional[Decimal] = None
    next_month_forecast: Optional[Forecast] = None

    # Raw model output, kept only when it could not be parsed
    text_analysis: Optional[str] = None
    # Set only when the fallback analyzer itself failed
    error: Optional[str] = None

    provenance: InsightProvenance = Field(
        default=InsightProvenance.AI,
        exclude=True,
    )

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready camelCase dict without empty optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AnalysisResponse(InsightModel):
    """
    What get_financial_analysis returns to its caller.

    success=False still carries a populated analysis (the fallback),
    never a bare error.
    """

    success: bool
    analysis: InsightResult
    raw_data: Optional[FinancialSummary] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    model_used: Optional[str] = None
    error: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        payload = {
            "success": self.success,
            "analysis": self.analysis.to_payload(),
            "rawData": self.raw_data.to_payload() if self.raw_data else None,
            "timestamp": self.timestamp.isoformat(),
            "modelUsed": self.model_used,
        }
        if self.error:
            payload["error"] = self.error
        return payload
