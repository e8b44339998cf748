"""AI Agents package."""

from ledger_insights.agents.insight_agent import CONNECTIVITY_PROMPT, InsightRequester

__all__ = [
    "CONNECTIVITY_PROMPT",
    "InsightRequester",
]
