"""
Ledger Aggregation

Turns raw income and expense records into a FinancialSummary.

This is a PURE function of its inputs: no I/O, no clock, no mutation of
the records passed in. Identical inputs always give identical output,
which is what lets the rest of the pipeline be tested with fixed data.

ROUNDING: ratios are quantized to 4 fractional digits (half-up) before
being multiplied by 100, so 0.4 becomes 40.0000 percent.
"""

from collections import defaultdict
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from ledger_insights.models.ledger import (
    FinancialSummary,
    LedgerRecord,
    TopExpense,
)


RATIO_PRECISION = Decimal("0.0001")
HUNDRED = Decimal("100")
DEFAULT_TOP_LIMIT = 5


def month_label(day: date) -> str:
    """'Mon YYYY', e.g. 'Mar 2025'."""
    return day.strftime("%b %Y")


def percent_of(numerator: Decimal, denominator: Decimal) -> Decimal:
    """numerator / denominator as a percentage, ratio rounded half-up to 4 places."""
    ratio = (numerator / denominator).quantize(RATIO_PRECISION, rounding=ROUND_HALF_UP)
    return ratio * HUNDRED


def monthly_totals(records: Iterable[LedgerRecord]) -> dict[str, Decimal]:
    """
    Sum amounts per calendar month, in chronological order.

    Records missing an amount or a date are skipped.
    """
    buckets: dict[tuple[int, int], Decimal] = defaultdict(lambda: Decimal("0"))
    for record in records:
        if record.amount is None or record.occurred_on is None:
            continue
        key = (record.occurred_on.year, record.occurred_on.month)
        buckets[key] += record.amount

    return {
        month_label(date(year, month, 1)): buckets[(year, month)]
        for year, month in sorted(buckets)
    }


def category_totals(expenses: Iterable[LedgerRecord]) -> dict[str, Decimal]:
    """Sum expense amounts per category name ('Uncategorized' when absent)."""
    totals: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    for record in expenses:
        if record.amount is None or record.occurred_on is None:
            continue
        totals[record.category_label] += record.amount
    return dict(totals)


def total_amount(records: Iterable[LedgerRecord]) -> Decimal:
    return sum(
        (r.amount for r in records if r.amount is not None),
        Decimal("0"),
    )


def top_expenses(
    expenses: Iterable[LedgerRecord],
    limit: int = DEFAULT_TOP_LIMIT,
) -> list[TopExpense]:
    """
    Largest expenses first.

    sorted() is stable, so equal amounts keep their input order.
    """
    ranked = sorted(
        (r for r in expenses if r.amount is not None),
        key=lambda r: r.amount,
        reverse=True,
    )
    return [
        TopExpense(
            name=r.name,
            amount=r.amount,
            date=r.occurred_on.isoformat() if r.occurred_on else "Unknown",
            category=r.category_label,
        )
        for r in ranked[:limit]
    ]


def income_growth(monthly_income: dict[str, Decimal]) -> Optional[Decimal]:
    """
    Growth of the latest month over the one before it.

    None when there are fewer than two months or the earlier month is
    not positive.
    """
    if len(monthly_income) < 2:
        return None
    values = list(monthly_income.values())
    previous, latest = values[-2], values[-1]
    if previous <= 0:
        return None
    return percent_of(latest - previous, previous)


def aggregate(
    income_records: Iterable[LedgerRecord],
    expense_records: Iterable[LedgerRecord],
    window_start: date,
    window_end: date,
    *,
    user_id: str = "",
    profile_name: str = "User",
    currency: str = "₹",
    top_limit: int = DEFAULT_TOP_LIMIT,
    analysis_period: Optional[str] = None,
) -> FinancialSummary:
    """
    Build the financial summary for one user and window.

    Args:
        income_records: Income records as returned by the ledger accessor
        expense_records: Expense records as returned by the ledger accessor
        window_start: First day of the analysis window
        window_end: Last day of the analysis window
        user_id: Owner of the records
        profile_name: Display name used to personalize the prompt
        currency: Currency symbol for amounts
        top_limit: How many of the largest expenses to report
        analysis_period: Label for the window, e.g. "Last 6 months"

    Returns:
        The derived FinancialSummary
    """
    incomes = list(income_records)
    expenses = list(expense_records)

    monthly_income = monthly_totals(incomes)
    monthly_expense = monthly_totals(expenses)

    total_income = total_amount(incomes)
    total_expense = total_amount(expenses)
    net_balance = total_income - total_expense

    if total_income > 0:
        savings_rate = percent_of(net_balance, total_income)
    else:
        savings_rate = Decimal("0")

    return FinancialSummary(
        user_id=user_id,
        profile_name=profile_name,
        currency=currency,
        period_start=window_start,
        period_end=window_end,
        analysis_period=analysis_period or f"{window_start.isoformat()} to {window_end.isoformat()}",
        total_income=total_income,
        total_expense=total_expense,
        net_balance=net_balance,
        savings_rate_percent=savings_rate,
        monthly_income_by_label=monthly_income,
        monthly_expense_by_label=monthly_expense,
        category_expense_totals=category_totals(expenses),
        top_expenses=top_expenses(expenses, top_limit),
        income_count=len(incomes),
        expense_count=len(expenses),
        income_growth_percent=income_growth(monthly_income),
    )
