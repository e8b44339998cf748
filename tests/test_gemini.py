"""Tests for the Gemini provider wiring (genai is replaced, no network)."""

import pytest

from ledger_insights.config import GeminiSettings
from ledger_insights.services.llm import ConfigurationError
from ledger_insights.services.llm import gemini as gemini_module
from ledger_insights.services.llm.gemini import GeminiInsightProvider


class FakeModel:
    def __init__(self, model_name, generation_config):
        self.model_name = model_name
        self.generation_config = generation_config


@pytest.fixture
def genai_calls(monkeypatch):
    """Record genai.configure calls instead of touching the global client."""
    calls = []

    def configure(**kwargs):
        calls.append(kwargs)

    monkeypatch.setattr(gemini_module.genai, "configure", configure)
    monkeypatch.setattr(gemini_module.genai, "GenerativeModel", FakeModel)
    return calls


class TestGeminiInsightProvider:

    def test_configures_once_at_construction(self, genai_calls, gemini_settings):
        GeminiInsightProvider(gemini_settings)

        assert len(genai_calls) == 1
        assert genai_calls[0]["api_key"] == "test-key"
        assert genai_calls[0]["client_options"] == {"quota_project_id": "test-project"}

    @pytest.mark.asyncio
    async def test_sessions_do_not_reconfigure(self, genai_calls, gemini_settings):
        provider = GeminiInsightProvider(gemini_settings)

        async with provider.session():
            pass
        async with provider.session():
            pass

        assert len(genai_calls) == 1

    @pytest.mark.asyncio
    async def test_session_uses_configured_model(self, genai_calls):
        settings = GeminiSettings(
            api_key="k",
            project_id="p",
            model_name="gemini-1.5-pro",
            max_tokens=1024,
            temperature=0.1,
        )
        provider = GeminiInsightProvider(settings)

        async with provider.session() as session:
            model = session._model

        assert model.model_name == "gemini-1.5-pro"
        assert model.generation_config == {"temperature": 0.1, "max_output_tokens": 1024}

    @pytest.mark.asyncio
    async def test_unconfigured_provider_never_touches_genai(self, genai_calls):
        provider = GeminiInsightProvider(GeminiSettings(api_key="k", project_id=""))

        assert provider.missing_configuration() == ["project_id"]
        with pytest.raises(ConfigurationError):
            async with provider.session():
                pass
        assert genai_calls == []

    def test_endpoint_override_is_passed_through(self, genai_calls):
        GeminiInsightProvider(GeminiSettings(
            api_key="k",
            project_id="p",
            api_endpoint="generativelanguage.example.com",
        ))

        assert genai_calls[0]["client_options"] == {
            "quota_project_id": "p",
            "api_endpoint": "generativelanguage.example.com",
        }
