"""
Insight Agent for Ledger Insights

Asks the generative provider for structured financial advice about a
FinancialSummary.

CRITICAL BOUNDARIES:
- CAN: Interpret the summary and phrase advice around it
- CANNOT: See raw ledger records, only the aggregated summary
- MUST: Answer in the fixed JSON template (the normalizer copes if not)

FLOW (one session per request, released on every exit path):
1. Configuration check  -> ConfigurationError, no network
2. Connectivity check   -> ConnectivityError on exception, timeout or empty reply
3. Analysis prompt      -> ProviderError on exception or timeout

Nothing is retried. Provider unavailability goes straight to the
fallback analyzer instead of being treated as transient.
"""

import asyncio
import json
from typing import Optional

import structlog

from ledger_insights.config import AnalysisSettings, GeminiSettings, get_settings
from ledger_insights.models.ledger import FinancialSummary
from ledger_insights.services.llm import (
    ConfigurationError,
    ConnectivityError,
    InsightProvider,
    InsightProviderError,
    ProviderError,
    ProviderSession,
)


logger = structlog.get_logger(__name__)

CONNECTIVITY_PROMPT = "Hello, respond with 'OK' if you can hear me."


class InsightRequester:
    """
    Builds the analysis prompt and runs it against the provider.

    Settings are passed in at construction so tests can pair a fake
    provider with hand-made settings.
    """

    def __init__(
        self,
        provider: InsightProvider,
        settings: Optional[GeminiSettings] = None,
        analysis_settings: Optional[AnalysisSettings] = None,
    ):
        self._provider = provider
        self._settings = settings or get_settings().gemini
        self._analysis = analysis_settings or get_settings().analysis

    @property
    def model_name(self) -> str:
        return self._provider.model_name

    def check_configuration(self) -> None:
        """
        Raises:
            ConfigurationError: If the provider lacks credential or project id
        """
        missing = self._provider.missing_configuration()
        if missing:
            raise ConfigurationError(missing)

    async def _call(self, session: ProviderSession, prompt: str) -> str:
        return await asyncio.wait_for(
            session.generate(prompt),
            timeout=self._settings.request_timeout_seconds,
        )

    async def _check_connectivity(self, session: ProviderSession) -> None:
        try:
            reply = await self._call(session, CONNECTIVITY_PROMPT)
        except asyncio.TimeoutError as e:
            raise ConnectivityError(
                f"Connectivity check timed out after {self._settings.request_timeout_seconds}s"
            ) from e
        except Exception as e:
            raise ConnectivityError(f"Connectivity check failed: {e}") from e

        if not reply or not reply.strip():
            raise ConnectivityError("Connectivity check returned an empty response")
        logger.info("insight_connectivity_ok", model=self.model_name)

    async def _generate(self, session: ProviderSession, prompt: str) -> str:
        logger.debug("insight_prompt_built", prompt_length=len(prompt))
        try:
            text = await self._call(session, prompt)
        except asyncio.TimeoutError as e:
            raise ProviderError(
                f"Analysis request timed out after {self._settings.request_timeout_seconds}s"
            ) from e
        except Exception as e:
            raise ProviderError(f"Failed to call {self.model_name}: {e}") from e

        logger.info("insight_response_received", response_length=len(text or ""))
        return text or ""

    async def request_insight(self, summary: FinancialSummary) -> str:
        """
        Get the raw model response for a summary.

        Returns:
            The provider's text, unparsed

        Raises:
            ConfigurationError: Credential or project id missing
            ConnectivityError: Connectivity check failed, or the session could not open
            ProviderError: The analysis call failed
        """
        self.check_configuration()
        prompt = self.build_prompt(summary)

        try:
            async with self._provider.session() as session:
                await self._check_connectivity(session)
                return await self._generate(session, prompt)
        except InsightProviderError:
            raise
        except Exception as e:
            raise ConnectivityError(f"Could not open a provider session: {e}") from e

    def build_prompt(self, summary: FinancialSummary) -> str:
        """
        The analysis prompt: summary data, the JSON template, and guidance.

        Falls back to a short prompt if the summary cannot be serialized.
        """
        currency = self._analysis.currency_symbol
        locale = self._analysis.locale_context

        try:
            data_json = json.dumps(summary.to_payload(), indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error("insight_prompt_serialization_failed", error=str(e))
            return f"""Analyze this financial data and provide insights in JSON format: {summary!r}

Provide response in valid JSON with: overallAssessment, financialHealthScore (0-100),
keyInsights (array), recommendations (array), and nextMonthForecast."""

        return f"""You are an expert financial advisor specializing in personal finance management.
Analyze the following financial data for {summary.profile_name} and provide detailed insights and recommendations.

IMPORTANT: You MUST respond with VALID JSON in the exact format specified below.
Do not include any markdown, code blocks, or additional text outside the JSON.

Financial Data:
{data_json}

Required JSON Response Format:
{{
  "overallAssessment": "A brief 2-3 sentence assessment of the user's financial health",
  "financialHealthScore": 85,
  "keyInsights": [
    "First key insight about spending patterns",
    "Second key insight about savings",
    "Third key insight about income trends"
  ],
  "monthlyAnalysis": {{
    "bestMonth": "Month with highest savings",
    "worstMonth": "Month with highest expenses",
    "trend": "Increasing/Decreasing/Stable"
  }},
  "categoryAnalysis": {{
    "topSpendingCategory": "Category where most money is spent",
    "recommendedCategoryToReduce": "Category where spending can be reduced",
    "savingsOpportunity": 5000
  }},
  "recommendations": [
    {{
      "title": "Actionable recommendation title",
      "description": "Detailed description of the recommendation",
      "priority": "High"
    }}
  ],
  "riskAlerts": [
    {{
      "type": "Spending Alert",
      "message": "Specific alert message",
      "severity": "Warning"
    }}
  ],
  "predictedSavings": 15000,
  "nextMonthForecast": {{
    "expectedIncome": 50000,
    "expectedExpenses": 35000,
    "expectedSavings": 15000
  }}
}}

Field rules:
- financialHealthScore: integer from 0 to 100
- priority: exactly one of "High", "Medium", "Low"
- severity: exactly one of "Warning", "Danger", "Info"
- month names use the same "Mon YYYY" labels as the data
- all amounts are plain numbers without currency symbols or separators

Guidelines:
1. All amounts are in {currency}
2. Be specific, actionable, and practical
3. Focus on the {locale} financial context and realities
4. Provide realistic numbers based on the data; forecasts must stay close to the monthly averages
5. financialHealthScore should reflect savings rate, spending patterns, and consistency"""
