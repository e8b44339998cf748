"""
Gemini Insight Provider

Google Gemini behind the InsightProvider interface, using the
google-generativeai client.

The project id is passed as the quota_project_id client option. Whether
Google attributes usage to that project depends on how the key was issued.
Both the API key and the project id are required; without either one the
pipeline serves the fallback analysis and never reaches the network.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import google.generativeai as genai
import structlog

from ledger_insights.config import GeminiSettings, get_settings
from ledger_insights.services.llm.provider import (
    ConfigurationError,
    InsightProvider,
    ProviderSession,
)


logger = structlog.get_logger(__name__)


class GeminiSession(ProviderSession):
    """A configured GenerativeModel for the duration of one request."""

    def __init__(self, model: genai.GenerativeModel):
        self._model = model

    async def generate(self, prompt: str) -> str:
        response = await self._model.generate_content_async(prompt)
        # .text raises ValueError when the candidate was blocked
        return response.text


class GeminiInsightProvider(InsightProvider):
    """
    Insight provider backed by Google Gemini.

    The client is configured once, when the provider is created with a
    complete configuration. An unconfigured provider never touches genai.
    """

    def __init__(self, settings: Optional[GeminiSettings] = None):
        self._settings = settings or get_settings().gemini
        self._model: Optional[genai.GenerativeModel] = None
        if not self.missing_configuration():
            self._configure_genai()

    @property
    def model_name(self) -> str:
        return self._settings.model_name

    @property
    def location(self) -> str:
        return self._settings.location

    def missing_configuration(self) -> list[str]:
        missing = []
        if not self._settings.api_key:
            missing.append("api_key")
        if not self._settings.project_id:
            missing.append("project_id")
        return missing

    def _client_options(self) -> dict:
        options = {"quota_project_id": self._settings.project_id}
        if self._settings.api_endpoint:
            options["api_endpoint"] = self._settings.api_endpoint
        return options

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(
            api_key=self._settings.api_key,
            client_options=self._client_options(),
        )
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[GeminiSession]:
        missing = self.missing_configuration()
        if missing:
            raise ConfigurationError(missing)

        logger.info(
            "gemini_session_opened",
            model=self._settings.model_name,
            project_id=self._settings.project_id,
            location=self._settings.location,
        )
        try:
            yield GeminiSession(self._model)
        finally:
            logger.info("gemini_session_closed", model=self._settings.model_name)
