"""
Fallback Analyzer

Rule-based analysis served whenever Gemini cannot be used: missing
configuration, a failed connectivity check, or a failed generation call.

The result has the same shape as a parsed AI result so callers never
need to know which one they got.

HEALTH SCORE RULES (applied in this order, each overwriting the last,
so the most severe matching rule wins):
- start at 70
- savings rate above 20%  -> 85
- savings rate below 10%  -> 60
- net savings negative    -> 40

FORECAST: each period total divided evenly by 6, rounded half-up to cents.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

import structlog

from ledger_insights.models.insight import (
    AlertSeverity,
    CategoryAnalysis,
    Forecast,
    InsightProvenance,
    InsightResult,
    MonthlyAnalysis,
    Priority,
    Recommendation,
    RiskAlert,
)
from ledger_insights.models.ledger import FinancialSummary


logger = structlog.get_logger(__name__)

BASE_SCORE = 70
HIGH_SAVINGS_SCORE = 85
LOW_SAVINGS_SCORE = 60
OVERSPENDING_SCORE = 40

HIGH_SAVINGS_RATE = Decimal("20")
LOW_SAVINGS_RATE = Decimal("10")

FORECAST_DIVISOR = Decimal("6")
CENTS = Decimal("0.01")
SAVINGS_OPPORTUNITY_SHARE = Decimal("0.10")

FALLBACK_ERROR = "Unable to generate analysis. Please check your data and configuration."


def health_score(savings_rate: Decimal, net_savings: Decimal) -> int:
    score = BASE_SCORE
    if savings_rate > HIGH_SAVINGS_RATE:
        score = HIGH_SAVINGS_SCORE
    if savings_rate < LOW_SAVINGS_RATE:
        score = LOW_SAVINGS_SCORE
    if net_savings < 0:
        score = OVERSPENDING_SCORE
    return score


def format_money(amount: Decimal, currency: str) -> str:
    """₹1,234.50 style: thousands separators, two decimals."""
    return f"{currency}{amount.quantize(CENTS, rounding=ROUND_HALF_UP):,.2f}"


def per_month(total: Decimal) -> Decimal:
    return (total / FORECAST_DIVISOR).quantize(CENTS, rounding=ROUND_HALF_UP)


def _label_order(label: str) -> datetime:
    return datetime.strptime(label, "%b %Y")


def monthly_analysis(summary: FinancialSummary) -> MonthlyAnalysis:
    labels = sorted(
        set(summary.monthly_income_by_label) | set(summary.monthly_expense_by_label),
        key=_label_order,
    )
    zero = Decimal("0")

    best_month: Optional[str] = None
    worst_month: Optional[str] = None
    if labels:
        best_month = max(
            labels,
            key=lambda m: (
                summary.monthly_income_by_label.get(m, zero)
                - summary.monthly_expense_by_label.get(m, zero)
            ),
        )
    if summary.monthly_expense_by_label:
        worst_month = max(
            summary.monthly_expense_by_label,
            key=lambda m: summary.monthly_expense_by_label[m],
        )

    growth = summary.income_growth_percent
    if growth is None or growth == 0:
        trend = "Stable"
    elif growth > 0:
        trend = "Increasing"
    else:
        trend = "Decreasing"

    return MonthlyAnalysis(best_month=best_month, worst_month=worst_month, trend=trend)


def category_analysis(summary: FinancialSummary) -> CategoryAnalysis:
    if not summary.category_expense_totals:
        return CategoryAnalysis()

    top_category = max(
        summary.category_expense_totals,
        key=lambda c: summary.category_expense_totals[c],
    )
    opportunity = (
        summary.category_expense_totals[top_category] * SAVINGS_OPPORTUNITY_SHARE
    ).quantize(CENTS, rounding=ROUND_HALF_UP)
    return CategoryAnalysis(
        top_spending_category=top_category,
        recommended_category_to_reduce=top_category,
        savings_opportunity=opportunity,
    )


def risk_alerts(summary: FinancialSummary) -> list[RiskAlert]:
    alerts = []
    if summary.total_income == 0:
        alerts.append(RiskAlert(
            type="No Income Recorded",
            message="No income was recorded in this period; add incomes for an accurate picture",
            severity=AlertSeverity.INFO,
        ))
    if summary.net_balance < 0:
        alerts.append(RiskAlert(
            type="Overspending",
            message=(
                "Expenses exceed income by "
                f"{format_money(-summary.net_balance, summary.currency)} this period"
            ),
            severity=AlertSeverity.DANGER,
        ))
    elif summary.total_income > 0 and summary.savings_rate_percent < LOW_SAVINGS_RATE:
        alerts.append(RiskAlert(
            type="Low Savings Rate",
            message="You are saving less than 10% of your income",
            severity=AlertSeverity.WARNING,
        ))
    return alerts


def _build(summary: FinancialSummary) -> InsightResult:
    currency = summary.currency
    savings = summary.net_balance
    savings_rate = summary.savings_rate_percent
    rate_display = savings_rate.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)

    forecast = Forecast(
        expected_income=per_month(summary.total_income),
        expected_expenses=per_month(summary.total_expense),
        expected_savings=per_month(savings),
    )

    return InsightResult(
        overall_assessment=(
            "Basic financial analysis. Enable AI for personalized insights "
            "and recommendations."
        ),
        financial_health_score=health_score(savings_rate, savings),
        key_insights=[
            f"Total Income: {format_money(summary.total_income, currency)}",
            f"Total Expenses: {format_money(summary.total_expense, currency)}",
            f"Net Savings: {format_money(savings, currency)}",
            f"Savings Rate: {rate_display:.1f}%",
        ],
        monthly_analysis=monthly_analysis(summary),
        category_analysis=category_analysis(summary),
        recommendations=[
            Recommendation(
                title="Configure Gemini AI",
                description=(
                    "Set up your Gemini API key and project id for detailed "
                    "AI-powered financial insights"
                ),
                priority=Priority.HIGH,
            ),
            Recommendation(
                title="Track Expenses Regularly",
                description=(
                    "Maintain consistent expense tracking to identify "
                    "spending patterns"
                ),
                priority=Priority.MEDIUM,
            ),
        ],
        risk_alerts=risk_alerts(summary),
        predicted_savings=forecast.expected_savings,
        next_month_forecast=forecast,
        provenance=InsightProvenance.FALLBACK,
    )


def fallback(summary: FinancialSummary) -> InsightResult:
    """
    Deterministic, non-AI analysis of a summary.

    Never raises: if building the analysis fails, the result carries
    only an error description.
    """
    try:
        return _build(summary)
    except Exception as e:
        logger.error("fallback_analysis_failed", error=str(e), exc_info=True)
        return InsightResult(
            error=FALLBACK_ERROR,
            provenance=InsightProvenance.FALLBACK,
        )
