"""
Envelope helpers for the reliability engines.

Converts an ``Insight`` (failure) or a ``GovernedResponse`` (success) into
the standard ToolResponse shape.
"""

from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from steadfast_mcp.core.governance.models import GovernedResponse, ResponseMode
from steadfast_mcp.core.insights.models import Insight, InsightCode
from steadfast_mcp.core.responses.builders import error_response, success_response
from steadfast_mcp.core.responses.types import ErrorCode, ErrorType, ToolResponse

INSIGHT_ERROR_MAP: Mapping[InsightCode, Tuple[ErrorCode, ErrorType]] = {
    InsightCode.AUTH: (ErrorCode.UNAUTHORIZED, ErrorType.AUTHENTICATION),
    InsightCode.NOT_FOUND: (ErrorCode.NOT_FOUND, ErrorType.NOT_FOUND),
    InsightCode.CONFLICT: (ErrorCode.CONFLICT, ErrorType.CONFLICT),
    InsightCode.RATE_LIMIT: (ErrorCode.RATE_LIMITED, ErrorType.RATE_LIMIT),
    InsightCode.STORAGE_LIMIT: (ErrorCode.QUOTA_EXCEEDED, ErrorType.QUOTA),
    InsightCode.TIER_LIMIT: (ErrorCode.TIER_LIMIT_EXCEEDED, ErrorType.QUOTA),
    InsightCode.DOWNTIME_REQUIRED: (ErrorCode.DOWNTIME_REQUIRED, ErrorType.CONFLICT),
    InsightCode.VECTOR_DIM_MISMATCH: (ErrorCode.VECTOR_DIMENSION_MISMATCH, ErrorType.VALIDATION),
    InsightCode.BAD_FILTER: (ErrorCode.INVALID_FILTER, ErrorType.VALIDATION),
    InsightCode.INDEXER_COOLDOWN: (ErrorCode.COOLDOWN_ACTIVE, ErrorType.RATE_LIMIT),
    InsightCode.NETWORK: (ErrorCode.UNAVAILABLE, ErrorType.UNAVAILABLE),
}

CONTENT_FIDELITY: Mapping[ResponseMode, str] = {
    ResponseMode.RAW: "full",
    ResponseMode.SUMMARIZED: "summary",
    ResponseMode.TRUNCATED: "partial",
}


def insight_response(
    insight: Insight,
    *,
    request_id: Optional[str] = None,
    telemetry: Optional[Mapping[str, Any]] = None,
) -> ToolResponse:
    """Render a failed-call Insight as an error ToolResponse.

    Raises:
        ValueError: If ``insight`` is the OK insight
    """
    if insight.ok:
        raise ValueError("insight_response() requires a failure insight")

    error_code, error_type = INSIGHT_ERROR_MAP[insight.code]
    rate_limit = None
    if insight.retry_after_seconds is not None:
        rate_limit = {"retry_after_seconds": insight.retry_after_seconds}

    return error_response(
        insight.message,
        data={"insight": insight.to_dict()},
        error_code=error_code,
        error_type=error_type,
        remediation=insight.recommendation,
        details=dict(insight.extras) or None,
        request_id=request_id,
        rate_limit=rate_limit,
        telemetry=telemetry,
    )


def governed_response(
    governed: GovernedResponse,
    *,
    request_id: Optional[str] = None,
    telemetry: Optional[Mapping[str, Any]] = None,
    warnings: Optional[Sequence[str]] = None,
    extra: Optional[Mapping[str, Any]] = None,
) -> ToolResponse:
    """Render a governed success payload as a ToolResponse.

    The payload lands under ``data.result``; non-raw modes add a warning and
    a ``content_fidelity`` other than "full".
    """
    all_warnings = list(warnings or [])
    if governed.mode is ResponseMode.SUMMARIZED:
        all_warnings.append(
            f"RESPONSE_SUMMARIZED: {governed.original_size_bytes} bytes summarized; "
            "use targeted queries or pagination for specific sections"
        )
    elif governed.mode is ResponseMode.TRUNCATED:
        all_warnings.append(
            f"RESPONSE_TRUNCATED: {governed.original_size_bytes} bytes truncated; "
            "use skip/top pagination to retrieve the rest"
        )

    data: Dict[str, Any] = {"result": governed.payload}
    if extra:
        data.update(extra)

    return success_response(
        data,
        warnings=all_warnings or None,
        telemetry=telemetry,
        content_fidelity=CONTENT_FIDELITY[governed.mode],
        governance=governed.metadata(),
        request_id=request_id,
    )
