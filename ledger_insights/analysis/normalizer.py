"""
Response Normalizer

Parses Gemini output into an InsightResult.

Models are asked for bare JSON but regularly wrap it in a markdown
fence anyway. We strip ONE layer of fence (```json or bare ```) and
parse what is left. Anything that still does not fit the InsightResult
schema is NOT an error for the caller: the raw text is kept verbatim in
text_analysis and a generic, neutral result is returned around it.
"""

import structlog
from pydantic import ValidationError

from ledger_insights.models.insight import (
    InsightProvenance,
    InsightResult,
    Priority,
    Recommendation,
)


logger = structlog.get_logger(__name__)

DEGRADED_SCORE = 75


class ParseError(ValueError):
    """Model output is not a usable insight document."""
    pass


def strip_code_fence(text: str) -> str:
    """Remove a single leading and trailing markdown fence, if present."""
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[len("```json"):]
    elif cleaned.startswith("```"):
        cleaned = cleaned[len("```"):]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-len("```")]
    return cleaned.strip()


def parse_insight(raw_text: str) -> InsightResult:
    """
    Strict parse of model output.

    Raises:
        ParseError: If the text is not a JSON object matching InsightResult
    """
    cleaned = strip_code_fence(raw_text)
    try:
        result = InsightResult.model_validate_json(cleaned)
    except ValidationError as e:
        raise ParseError(f"Response does not match insight schema: {e.error_count()} errors") from e

    if result.overall_assessment is None or result.financial_health_score is None:
        raise ParseError("Response is missing overallAssessment or financialHealthScore")

    # Provider output must not claim to be an error or a fallback
    return result.model_copy(update={
        "provenance": InsightProvenance.AI,
        "error": None,
    })


def degraded_result(raw_text: str) -> InsightResult:
    """Neutral result wrapped around text we could not parse."""
    return InsightResult(
        overall_assessment="AI analysis completed. Some formatting issues occurred.",
        financial_health_score=DEGRADED_SCORE,
        key_insights=[
            "Analysis generated successfully",
            "Review your spending patterns regularly",
            "Consider increasing your savings rate",
        ],
        recommendations=[
            Recommendation(
                title="Check AI Configuration",
                description="Ensure the Gemini API is properly configured",
                priority=Priority.HIGH,
            ),
        ],
        text_analysis=raw_text,
        provenance=InsightProvenance.DEGRADED,
    )


def normalize(raw_text: str) -> InsightResult:
    """
    Parse model output, degrading instead of failing.

    Returns:
        The parsed InsightResult, or a degraded one carrying raw_text
    """
    try:
        result = parse_insight(raw_text)
    except ParseError as e:
        logger.warning(
            "insight_parse_degraded",
            error=str(e),
            response_length=len(raw_text),
        )
        logger.debug("insight_raw_response", raw_text=raw_text)
        return degraded_result(raw_text)

    logger.info("insight_parsed", score=result.financial_health_score)
    return result
