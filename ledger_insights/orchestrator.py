"""
Main Orchestrator for Ledger Insights

Ties the components together into the end-to-end analysis flow:

    profile -> ledger accessor -> aggregator -> insight agent -> normalizer
                                                     |
                                                     +-> fallback analyzer

DESIGN DECISION: The caller ALWAYS receives a structurally valid analysis.
- Ledger failures are absorbed by the accessor's fallback strategies
- Unparseable model output is absorbed by the normalizer
- Provider failures of any kind route to the rule-based fallback
Degradation is reported through AnalysisResponse.success and .error.

The only failure that aborts the flow is an unknown user: without a
profile there is no one to build a summary for. A profile store that is
unreachable is not the same thing, and the flow carries on without a name.
"""

import calendar
import logging
from datetime import date, datetime
from typing import Callable, Optional

import structlog

from ledger_insights.agents import InsightRequester
from ledger_insights.analysis import LedgerAccessor, aggregate, fallback, normalize
from ledger_insights.audit import AuditLogger, create_correlation_id
from ledger_insights.config import AnalysisSettings, get_settings
from ledger_insights.models.insight import AnalysisResponse, InsightProvenance
from ledger_insights.models.ledger import FinancialSummary, LedgerKind
from ledger_insights.services.llm import GeminiInsightProvider, InsightProviderError
from ledger_insights.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsLedgerStore,
    GoogleSheetsProfileStore,
    InMemoryLedgerStore,
    InMemoryProfileStore,
    LedgerStoreInterface,
    NotFoundError,
    ProfileStoreInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)

SERVICE_NAME = "AI Financial Assistant"
FALLBACK_MODEL_LABEL = "rule-based"
DEFAULT_PROFILE_NAME = "User"


def months_before(day: date, months: int) -> date:
    """Same day `months` earlier, clamped to the end of shorter months."""
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


class FinancialAnalysisFlow:
    """
    Orchestrates one financial analysis request.

    Flow:
    1. Profile lookup   -> NotFoundError aborts
    2. Ledger fetch     -> incomes and expenses for the window
    3. Aggregation      -> FinancialSummary
    4. Insight request  -> raw model text, or a provider error
    5. Normalization    -> InsightResult (AI or degraded)
       Fallback         -> InsightResult (rule-based) on any provider error
    """

    def __init__(
        self,
        ledger_store: LedgerStoreInterface,
        profile_store: ProfileStoreInterface,
        requester: InsightRequester,
        settings: Optional[AnalysisSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Callable[[], date] = date.today,
    ):
        self._settings = settings or get_settings().analysis
        self._accessor = LedgerAccessor(
            ledger_store,
            clip_fallback_to_window_end=self._settings.clip_fallback_to_window_end,
        )
        self._profiles = profile_store
        self._requester = requester
        self._audit_logger = audit_logger or AuditLogger()
        self._clock = clock

    def analysis_window(self) -> tuple[date, date]:
        """[today - window_months, today]"""
        today = self._clock()
        return months_before(today, self._settings.window_months), today

    async def build_summary(self, user_id: str) -> FinancialSummary:
        """
        Fetch and aggregate the user's ledger for the analysis window.

        A profile store outage does not abort the analysis: the summary is
        built with the default display name instead.

        Raises:
            NotFoundError: If the user has no profile
        """
        try:
            profile = await self._profiles.get_by_id(user_id)
        except NotFoundError:
            raise
        except StorageError as e:
            logger.warning("profile_lookup_failed", user_id=user_id, error=str(e))
            profile_name = DEFAULT_PROFILE_NAME
        else:
            if profile is None:
                raise NotFoundError(f"Profile not found for ID: {user_id}")
            profile_name = profile.display_name

        window_start, window_end = self.analysis_window()
        incomes = await self._accessor.fetch(
            user_id, window_start, window_end, LedgerKind.INCOME
        )
        expenses = await self._accessor.fetch(
            user_id, window_start, window_end, LedgerKind.EXPENSE
        )

        return aggregate(
            incomes,
            expenses,
            window_start,
            window_end,
            user_id=user_id,
            profile_name=profile_name,
            currency=self._settings.currency_symbol,
            top_limit=self._settings.top_expense_limit,
            analysis_period=f"Last {self._settings.window_months} months",
        )

    async def get_financial_analysis(self, user_id: str) -> AnalysisResponse:
        """
        Analyze a user's finances.

        Returns:
            success=True with the AI analysis, or success=False with an
            error message and the rule-based analysis

        Raises:
            NotFoundError: If the user has no profile
        """
        correlation_id = create_correlation_id()
        logger.info("financial_analysis_requested", user_id=user_id)
        await self._audit_logger.log_analysis_requested(user_id, correlation_id)

        try:
            summary = await self.build_summary(user_id)
        except NotFoundError:
            await self._audit_logger.log_profile_not_found(user_id, correlation_id)
            raise

        await self._audit_logger.log_summary_built(
            user_id,
            income_count=summary.income_count,
            expense_count=summary.expense_count,
            correlation_id=correlation_id,
        )

        try:
            raw_text = await self._requester.request_insight(summary)
        except InsightProviderError as e:
            await self._audit_logger.log_external_service_error(
                service="gemini",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            return await self._fallback_response(
                summary,
                f"AI analysis unavailable: {e}",
                correlation_id,
            )

        try:
            analysis = normalize(raw_text)
        except Exception as e:
            logger.error("financial_analysis_failed", user_id=user_id, exc_info=True)
            await self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            return await self._fallback_response(summary, str(e), correlation_id)

        if analysis.provenance == InsightProvenance.DEGRADED:
            await self._audit_logger.log_parse_degraded(
                user_id,
                response_length=len(raw_text),
                correlation_id=correlation_id,
            )

        await self._audit_logger.log_analysis_completed(
            user_id,
            model_name=self._requester.model_name,
            score=analysis.financial_health_score,
            correlation_id=correlation_id,
        )
        return AnalysisResponse(
            success=True,
            analysis=analysis,
            raw_data=summary,
            model_used=self._requester.model_name,
        )

    async def _fallback_response(
        self,
        summary: FinancialSummary,
        reason: str,
        correlation_id,
    ) -> AnalysisResponse:
        logger.warning(
            "financial_analysis_fallback",
            user_id=summary.user_id,
            reason=reason,
        )
        await self._audit_logger.log_fallback_used(
            summary.user_id,
            reason=reason,
            correlation_id=correlation_id,
        )
        return AnalysisResponse(
            success=False,
            analysis=fallback(summary),
            raw_data=summary,
            model_used=FALLBACK_MODEL_LABEL,
            error=reason,
        )

    def health_check(self) -> dict:
        """Service status for monitoring; makes no network calls."""
        return {
            "service": SERVICE_NAME,
            "status": "online",
            "timestamp": datetime.utcnow().isoformat(),
            "provider_configured": not self._requester_missing_configuration(),
            "model": self._requester.model_name,
            "operations": ["financial_analysis", "health"],
        }

    def _requester_missing_configuration(self) -> bool:
        try:
            self._requester.check_configuration()
        except InsightProviderError:
            return True
        return False


def create_app_components(
    use_storage: bool = True,
) -> tuple[FinancialAnalysisFlow, Optional[GoogleSheetsClient]]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to initialize Google Sheets storage.
                    Set to False to run against empty in-memory stores.

    Returns:
        (analysis_flow, sheets_client)
    """
    settings = get_settings()
    logging.basicConfig(level=settings.app.log_level, format="%(message)s")

    sheets_client = None
    ledger_store: LedgerStoreInterface = InMemoryLedgerStore()
    profile_store: ProfileStoreInterface = InMemoryProfileStore()
    audit_logger = AuditLogger()  # Local-only logging

    if use_storage:
        try:
            sheets_client = GoogleSheetsClient()
            ledger_store = GoogleSheetsLedgerStore(sheets_client)
            profile_store = GoogleSheetsProfileStore(sheets_client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_not_configured", error=str(e))
            sheets_client = None

    requester = InsightRequester(
        GeminiInsightProvider(settings.gemini),
        settings=settings.gemini,
        analysis_settings=settings.analysis,
    )
    flow = FinancialAnalysisFlow(
        ledger_store=ledger_store,
        profile_store=profile_store,
        requester=requester,
        settings=settings.analysis,
        audit_logger=audit_logger,
    )
    return flow, sheets_client
