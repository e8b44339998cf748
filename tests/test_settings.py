"""Tests for loading configuration from the environment and .env."""

import pytest

from ledger_insights.config import (
    AnalysisSettings,
    GeminiSettings,
    get_settings,
    validate_all_settings,
)


ENV_KEYS = (
    "GEMINI_API_KEY",
    "GEMINI_PROJECT_ID",
    "ANALYSIS_WINDOW_MONTHS",
)


@pytest.fixture
def dotenv(tmp_path, monkeypatch):
    """A .env in a clean working directory, with no shadowing variables."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text(
        "GEMINI_API_KEY=k\n"
        "GEMINI_PROJECT_ID=p\n"
        "ANALYSIS_WINDOW_MONTHS=3\n",
        encoding="utf-8",
    )
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()


class TestDotenv:
    """Values in .env reach every settings section."""

    def test_gemini_reads_dotenv(self, dotenv):
        settings = GeminiSettings()
        assert settings.api_key == "k"
        assert settings.project_id == "p"

    def test_analysis_reads_dotenv(self, dotenv):
        assert AnalysisSettings().window_months == 3

    def test_validate_all_settings_sees_dotenv(self, dotenv):
        results = validate_all_settings()
        assert results["gemini"] is True
        assert "gemini_error" not in results

    def test_environment_overrides_dotenv(self, dotenv, monkeypatch):
        monkeypatch.setenv("ANALYSIS_WINDOW_MONTHS", "9")
        assert AnalysisSettings().window_months == 9


class TestGeminiSettings:

    def test_blank_credentials_are_missing(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("GEMINI_API_KEY", "")
        monkeypatch.setenv("GEMINI_PROJECT_ID", "  ")
        settings = GeminiSettings()
        assert settings.api_key is None
        assert settings.project_id is None
