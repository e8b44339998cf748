"""Financial analysis package: ledger access, aggregation, parsing, fallback."""

from ledger_insights.analysis.accessor import LATEST_RECORDS_LIMIT, LedgerAccessor
from ledger_insights.analysis.aggregator import aggregate, month_label
from ledger_insights.analysis.fallback import fallback, health_score
from ledger_insights.analysis.normalizer import (
    DEGRADED_SCORE,
    ParseError,
    normalize,
    parse_insight,
    strip_code_fence,
)

__all__ = [
    "DEGRADED_SCORE",
    "LATEST_RECORDS_LIMIT",
    "LedgerAccessor",
    "ParseError",
    "aggregate",
    "fallback",
    "health_score",
    "month_label",
    "normalize",
    "parse_insight",
    "strip_code_fence",
]
