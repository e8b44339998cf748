"""
Audit Logger

DESIGN DECISION: Every analysis request is logged.
This provides:
1. Traceability of which users got AI advice and which got the fallback
2. Debugging capability when the provider misbehaves
3. A record of data-source degradation

The audit logger:
- Is async to not block main flow
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from ledger_insights.models.audit import AuditEvent, AuditEventBuilder
from ledger_insights.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence), when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_analysis_requested(
        self,
        user_id: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.analysis_requested(
            user_id=user_id,
            correlation_id=correlation_id,
        ))

    async def log_summary_built(
        self,
        user_id: str,
        income_count: int,
        expense_count: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.summary_built(
            user_id=user_id,
            income_count=income_count,
            expense_count=expense_count,
            correlation_id=correlation_id,
        ))

    async def log_analysis_completed(
        self,
        user_id: str,
        model_name: str,
        score: Optional[int],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.analysis_completed(
            user_id=user_id,
            model_name=model_name,
            score=score,
            correlation_id=correlation_id,
        ))

    async def log_parse_degraded(
        self,
        user_id: str,
        response_length: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.insight_parse_degraded(
            user_id=user_id,
            response_length=response_length,
            correlation_id=correlation_id,
        ))

    async def log_fallback_used(
        self,
        user_id: str,
        reason: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.fallback_used(
            user_id=user_id,
            reason=reason,
            correlation_id=correlation_id,
        ))

    async def log_profile_not_found(
        self,
        user_id: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.profile_not_found(
            user_id=user_id,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log external service error."""
        await self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new analysis request.
    Pass it through all subsequent operations.
    """
    return uuid4()
