"""Tests for the insight requester (no real API calls)."""

import pytest
from datetime import date

from ledger_insights.agents import CONNECTIVITY_PROMPT, InsightRequester
from ledger_insights.config import AnalysisSettings
from ledger_insights.analysis.aggregator import aggregate
from ledger_insights.services.llm import (
    ConfigurationError,
    ConnectivityError,
    ProviderError,
)
from tests.fakes import HANG, FakeProvider, expense, income


@pytest.fixture
def summary():
    return aggregate(
        [income("10000", date(2025, 1, 1))],
        [expense("4000", date(2025, 1, 5), category="Rent")],
        date(2024, 10, 1),
        date(2025, 4, 1),
        user_id="user-1",
        profile_name="Asha Rao",
        analysis_period="Last 6 months",
    )


def _requester(provider, gemini_settings, analysis_settings):
    return InsightRequester(
        provider,
        settings=gemini_settings,
        analysis_settings=analysis_settings,
    )


class TestInsightRequester:
    """Connectivity check, generation and session handling."""

    @pytest.mark.asyncio
    async def test_returns_raw_response(self, summary, gemini_settings, analysis_settings):
        provider = FakeProvider(replies=["OK", '{"overallAssessment": "fine"}'])
        requester = _requester(provider, gemini_settings, analysis_settings)

        text = await requester.request_insight(summary)

        assert text == '{"overallAssessment": "fine"}'
        assert provider.prompts[0] == CONNECTIVITY_PROMPT
        assert provider.opened == provider.closed == 1

    @pytest.mark.asyncio
    async def test_unconfigured_provider_is_never_opened(
        self, summary, gemini_settings, analysis_settings
    ):
        provider = FakeProvider(replies=["OK", "{}"], missing=["api_key", "project_id"])
        requester = _requester(provider, gemini_settings, analysis_settings)

        with pytest.raises(ConfigurationError) as exc_info:
            await requester.request_insight(summary)

        assert exc_info.value.missing == ["api_key", "project_id"]
        assert provider.opened == 0
        assert provider.prompts == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("check_reply", [RuntimeError("network down"), "", "   ", HANG])
    async def test_failed_connectivity_check(self, check_reply, summary, gemini_settings, analysis_settings):
        provider = FakeProvider(replies=[check_reply, "{}"])
        requester = _requester(provider, gemini_settings, analysis_settings)

        with pytest.raises(ConnectivityError):
            await requester.request_insight(summary)

        # Analysis prompt never sent, session still released
        assert provider.prompts == [CONNECTIVITY_PROMPT]
        assert provider.opened == provider.closed == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("analysis_reply", [RuntimeError("quota exceeded"), HANG])
    async def test_failed_generation(
        self, analysis_reply, summary, gemini_settings, analysis_settings
    ):
        provider = FakeProvider(replies=["OK", analysis_reply])
        requester = _requester(provider, gemini_settings, analysis_settings)

        with pytest.raises(ProviderError):
            await requester.request_insight(summary)

        assert len(provider.prompts) == 2
        assert provider.opened == provider.closed == 1

    @pytest.mark.asyncio
    async def test_session_that_cannot_open(self, summary, gemini_settings, analysis_settings):
        provider = FakeProvider(open_error=OSError("dns failure"))
        requester = _requester(provider, gemini_settings, analysis_settings)

        with pytest.raises(ConnectivityError):
            await requester.request_insight(summary)

    def test_check_configuration(self, gemini_settings, analysis_settings):
        configured = _requester(FakeProvider(), gemini_settings, analysis_settings)
        configured.check_configuration()

        missing = _requester(FakeProvider(missing=["project_id"]), gemini_settings, analysis_settings)
        with pytest.raises(ConfigurationError, match="project_id"):
            missing.check_configuration()

    def test_model_name_comes_from_provider(self, gemini_settings, analysis_settings):
        requester = _requester(FakeProvider(model="gemini-test"), gemini_settings, analysis_settings)
        assert requester.model_name == "gemini-test"


class TestBuildPrompt:
    """Analysis prompt contents."""

    def test_prompt_contains_summary_and_template(
        self, summary, gemini_settings, analysis_settings
    ):
        requester = _requester(FakeProvider(), gemini_settings, analysis_settings)

        prompt = requester.build_prompt(summary)

        assert "Asha Rao" in prompt
        assert '"totalIncome": "10000"' in prompt
        assert '"categoryExpenseTotals"' in prompt
        assert '"financialHealthScore"' in prompt
        assert '"nextMonthForecast"' in prompt
        assert "All amounts are in ₹" in prompt
        assert "Indian financial context" in prompt

    def test_prompt_follows_locale_settings(self, summary, gemini_settings):
        requester = _requester(
            FakeProvider(),
            gemini_settings,
            AnalysisSettings(currency_symbol="$", locale_context="US"),
        )

        prompt = requester.build_prompt(summary)

        assert "All amounts are in $" in prompt
        assert "US financial context" in prompt
