"""
Ledger Data Models for Ledger Insights

These models define the schemas for the ledger records read from storage
and the financial summary derived from them.

DESIGN DECISION: Income and expense records share one model.
The kind is a discriminant field, not a subclass, because every
aggregation step treats both the same way apart from which bucket
they land in.

Ledger records are frozen: the aggregator reads them and never
writes back into them.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


UNCATEGORIZED = "Uncategorized"


# =============================================================================
# ENUMS
# =============================================================================

class LedgerKind(str, Enum):
    """Which side of the ledger a record belongs to."""
    INCOME = "income"
    EXPENSE = "expense"


# =============================================================================
# LEDGER RECORDS
# =============================================================================

class LedgerRecord(BaseModel):
    """
    A single income or expense entry belonging to one user.

    Amount and date are optional because older rows can be missing
    either; the aggregator skips such records where it needs them.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Record identifier"
    )
    user_id: str = Field(
        ...,
        min_length=1,
        description="Owner of the record"
    )
    kind: LedgerKind
    name: Optional[str] = Field(
        default=None,
        max_length=200,
        description="Short description, e.g. 'Salary' or 'Rent'"
    )
    category_id: Optional[str] = None
    category_name: Optional[str] = Field(
        default=None,
        max_length=100,
    )
    amount: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Amount in the ledger currency"
    )
    occurred_on: Optional[date] = Field(
        default=None,
        description="Calendar date of the income or expense"
    )
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def category_label(self) -> str:
        """Category name, or the literal 'Uncategorized'."""
        return self.category_name or UNCATEGORIZED


class Profile(BaseModel):
    """The slice of a user profile the analysis needs."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.full_name or "User"


# =============================================================================
# FINANCIAL SUMMARY
# =============================================================================

class SummaryModel(BaseModel):
    """Base for derived models: snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class TopExpense(SummaryModel):
    """One of the largest expenses in the analysis window."""

    name: Optional[str] = None
    amount: Decimal
    date: str = Field(
        ...,
        description="ISO date, or 'Unknown' when the record has none"
    )
    category: str = UNCATEGORIZED


class FinancialSummary(SummaryModel):
    """
    Totals and breakdowns computed from ledger records over a window.

    Derived on every request and never persisted.

    INVARIANTS:
    - net_balance == total_income - total_expense
    - savings_rate_percent == 0 when total_income == 0
    - monthly mappings are in chronological order
    - income_growth_percent is None unless two monthly income
      buckets exist and the earlier one is positive
    """

    user_id: str
    profile_name: str = "User"
    currency: str = "₹"

    period_start: date
    period_end: date
    analysis_period: str = Field(
        default="Last 6 months",
        description="Human-readable description of the window"
    )

    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    net_balance: Decimal = Decimal("0")
    savings_rate_percent: Decimal = Decimal("0")

    monthly_income_by_label: dict[str, Decimal] = Field(default_factory=dict)
    monthly_expense_by_label: dict[str, Decimal] = Field(default_factory=dict)
    category_expense_totals: dict[str, Decimal] = Field(default_factory=dict)
    top_expenses: list[TopExpense] = Field(default_factory=list)

    income_count: int = Field(default=0, ge=0)
    expense_count: int = Field(default=0, ge=0)

    income_growth_percent: Optional[Decimal] = None

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready camelCase dict; absent growth is omitted, not null."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
