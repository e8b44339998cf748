import pytest

from ledger_insights.config import AnalysisSettings, GeminiSettings


@pytest.fixture
def gemini_settings():
    return GeminiSettings(
        api_key="test-key",
        project_id="test-project",
        request_timeout_seconds=0.05,
    )


@pytest.fixture
def analysis_settings():
    return AnalysisSettings(
        window_months=6,
        top_expense_limit=5,
        currency_symbol="₹",
        locale_context="Indian",
        clip_fallback_to_window_end=False,
    )
