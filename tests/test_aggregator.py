"""Tests for ledger aggregation."""

import pytest
from datetime import date
from decimal import Decimal

from ledger_insights.analysis.aggregator import (
    aggregate,
    income_growth,
    month_label,
    percent_of,
)
from tests.fakes import expense, income


WINDOW_START = date(2024, 10, 1)
WINDOW_END = date(2025, 4, 1)


def _aggregate(incomes, expenses, **kwargs):
    return aggregate(incomes, expenses, WINDOW_START, WINDOW_END, **kwargs)


class TestTotals:
    """Totals, net balance and savings rate."""

    def test_basic_totals(self):
        summary = _aggregate(
            [income("10000", date(2025, 1, 5)), income("10000", date(2025, 2, 5))],
            [expense("4000", date(2025, 1, 10)), expense("5000", date(2025, 2, 10))],
        )
        assert summary.total_income == Decimal("20000")
        assert summary.total_expense == Decimal("9000")
        assert summary.net_balance == Decimal("11000")
        assert summary.savings_rate_percent == Decimal("55.0000")
        assert summary.income_count == 2
        assert summary.expense_count == 2

    def test_zero_income_gives_zero_savings_rate(self):
        summary = _aggregate([], [expense("500", date(2025, 1, 10))])
        assert summary.savings_rate_percent == Decimal("0")
        assert summary.net_balance == Decimal("-500")

    def test_empty_ledger(self):
        summary = _aggregate([], [])
        assert summary.total_income == 0
        assert summary.total_expense == 0
        assert summary.monthly_income_by_label == {}
        assert summary.category_expense_totals == {}
        assert summary.top_expenses == []
        assert summary.income_growth_percent is None

    def test_savings_rate_rounds_ratio_half_up(self):
        # 1/3 -> 0.3333 -> 33.33
        summary = _aggregate([income("3", date(2025, 1, 1))], [expense("2", date(2025, 1, 2))])
        assert summary.savings_rate_percent == Decimal("33.3300")

    def test_records_without_amount_do_not_count_toward_totals(self):
        summary = _aggregate(
            [income("1000", date(2025, 1, 1)), income(None, date(2025, 1, 2))],
            [],
        )
        assert summary.total_income == Decimal("1000")
        assert summary.income_count == 2

    def test_undated_records_count_toward_totals(self):
        summary = _aggregate([], [expense("700", None)])
        assert summary.total_expense == Decimal("700")
        assert summary.monthly_expense_by_label == {}

    def test_inputs_are_not_modified(self):
        incomes = [income("1000", date(2025, 1, 1))]
        expenses = [expense("300", date(2025, 1, 2))]
        before = [r.model_dump() for r in incomes + expenses]
        _aggregate(incomes, expenses)
        assert [r.model_dump() for r in incomes + expenses] == before


class TestMonthlyBreakdown:
    """Per-month buckets."""

    def test_month_label_format(self):
        assert month_label(date(2025, 3, 14)) == "Mar 2025"

    def test_months_are_chronological(self):
        summary = _aggregate(
            [
                income("300", date(2025, 2, 1)),
                income("100", date(2024, 11, 1)),
                income("200", date(2024, 12, 1)),
            ],
            [],
        )
        assert list(summary.monthly_income_by_label) == ["Nov 2024", "Dec 2024", "Feb 2025"]

    def test_same_month_sums(self):
        summary = _aggregate(
            [],
            [expense("100", date(2025, 1, 1)), expense("250", date(2025, 1, 31))],
        )
        assert summary.monthly_expense_by_label == {"Jan 2025": Decimal("350")}


class TestCategories:
    """Category totals."""

    def test_category_totals(self):
        summary = _aggregate(
            [],
            [
                expense("100", date(2025, 1, 1), category="Food"),
                expense("50", date(2025, 1, 2), category="Food"),
                expense("75", date(2025, 1, 3)),
            ],
        )
        assert summary.category_expense_totals == {
            "Food": Decimal("150"),
            "Uncategorized": Decimal("75"),
        }

    def test_category_totals_skip_undated_records(self):
        summary = _aggregate([], [expense("100", None, category="Food")])
        assert summary.category_expense_totals == {}


class TestTopExpenses:
    """Largest expenses list."""

    def test_ordered_by_amount_and_limited(self):
        expenses = [expense(str(a), date(2025, 1, 1)) for a in (10, 60, 30, 50, 20, 40)]
        summary = _aggregate([], expenses, top_limit=5)
        assert [t.amount for t in summary.top_expenses] == [
            Decimal("60"), Decimal("50"), Decimal("40"), Decimal("30"), Decimal("20"),
        ]

    def test_ties_keep_input_order(self):
        expenses = [
            expense("100", date(2025, 1, 1), name="first"),
            expense("100", date(2025, 1, 2), name="second"),
        ]
        summary = _aggregate([], expenses)
        assert [t.name for t in summary.top_expenses] == ["first", "second"]

    def test_missing_fields_are_labelled(self):
        summary = _aggregate([], [expense("100", None)])
        top = summary.top_expenses[0]
        assert top.date == "Unknown"
        assert top.category == "Uncategorized"

    def test_dated_entry_uses_iso_date(self):
        summary = _aggregate([], [expense("100", date(2025, 1, 9), category="Rent")])
        assert summary.top_expenses[0].date == "2025-01-09"
        assert summary.top_expenses[0].category == "Rent"


class TestIncomeGrowth:
    """Latest month over the month before it."""

    def test_growth_between_last_two_months(self):
        summary = _aggregate(
            [income("10000", date(2025, 1, 1)), income("12000", date(2025, 2, 1))],
            [],
        )
        assert summary.income_growth_percent == Decimal("20")

    def test_single_month_has_no_growth(self):
        assert income_growth({"Jan 2025": Decimal("100")}) is None

    def test_zero_previous_month_has_no_growth(self):
        assert income_growth({
            "Jan 2025": Decimal("0"),
            "Feb 2025": Decimal("100"),
        }) is None

    def test_negative_growth(self):
        assert income_growth({
            "Jan 2025": Decimal("200"),
            "Feb 2025": Decimal("150"),
        }) == Decimal("-25")

    @pytest.mark.parametrize("numerator,denominator,expected", [
        ("1", "8", "12.5000"),
        ("2", "3", "66.6700"),
        ("1", "20000", "0.0100"),
    ])
    def test_percent_of(self, numerator, denominator, expected):
        assert percent_of(Decimal(numerator), Decimal(denominator)) == Decimal(expected)


class TestSummaryMetadata:

    def test_defaults_and_labels(self):
        summary = _aggregate(
            [],
            [],
            user_id="user-1",
            profile_name="Asha",
            currency="₹",
            analysis_period="Last 6 months",
        )
        assert summary.user_id == "user-1"
        assert summary.profile_name == "Asha"
        assert summary.analysis_period == "Last 6 months"
        assert summary.period_start == WINDOW_START
        assert summary.period_end == WINDOW_END

    def test_period_label_derived_from_window(self):
        summary = _aggregate([], [])
        assert summary.analysis_period == "2024-10-01 to 2025-04-01"
