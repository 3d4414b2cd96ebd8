"""
Constructors for ToolResponse envelopes.

Tools should never build ``ToolResponse`` by hand; ``success_response`` and
``error_response`` keep ``meta`` consistent and fill in error defaults.
"""

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from steadfast_mcp.core.responses.types import (
    ErrorCode,
    ErrorType,
    ToolResponse,
    _build_meta,
)


def _code(value: Union[Enum, str]) -> str:
    return value.value if isinstance(value, Enum) else value


def success_response(
    data: Optional[Mapping[str, Any]] = None,
    *,
    warnings: Optional[Sequence[str]] = None,
    telemetry: Optional[Mapping[str, Any]] = None,
    content_fidelity: Optional[str] = None,
    governance: Optional[Mapping[str, Any]] = None,
    request_id: Optional[str] = None,
    meta: Optional[Mapping[str, Any]] = None,
    **fields: Any,
) -> ToolResponse:
    """Build a success envelope.

    ``data`` and any keyword ``fields`` are merged into the payload, fields
    winning on collision. ``content_fidelity`` other than "full" tells the
    client the payload was cut down to fit the response budget.
    """
    payload: Dict[str, Any] = {**(data or {}), **fields}
    return ToolResponse(
        success=True,
        data=payload,
        meta=_build_meta(
            request_id=request_id,
            warnings=warnings,
            telemetry=telemetry,
            content_fidelity=content_fidelity,
            governance=governance,
            extra=meta,
        ),
    )


def error_response(
    message: str,
    *,
    data: Optional[Mapping[str, Any]] = None,
    error_code: Optional[Union[ErrorCode, str]] = None,
    error_type: Optional[Union[ErrorType, str]] = None,
    remediation: Optional[str] = None,
    details: Optional[Mapping[str, Any]] = None,
    request_id: Optional[str] = None,
    rate_limit: Optional[Mapping[str, Any]] = None,
    telemetry: Optional[Mapping[str, Any]] = None,
    meta: Optional[Mapping[str, Any]] = None,
) -> ToolResponse:
    """Build a failure envelope.

    The payload always carries ``error_code`` (default INTERNAL_ERROR) and
    ``error_type`` (default internal). ``remediation`` and ``details`` are
    added when given. Keys already present in ``data`` are never overwritten.

    Example:
        >>> error_response(
        ...     "Index name is required",
        ...     error_code=ErrorCode.MISSING_REQUIRED,
        ...     error_type=ErrorType.VALIDATION,
        ...     remediation="Provide a non-empty index name",
        ... ).data["error_code"]
        'MISSING_REQUIRED'
    """
    payload: Dict[str, Any] = dict(data or {})
    payload.setdefault("error_code", _code(error_code or ErrorCode.INTERNAL_ERROR))
    payload.setdefault("error_type", _code(error_type or ErrorType.INTERNAL))
    if remediation is not None:
        payload.setdefault("remediation", remediation)
    if details:
        payload.setdefault("details", dict(details))

    return ToolResponse(
        success=False,
        data=payload,
        error=message,
        meta=_build_meta(
            request_id=request_id,
            rate_limit=rate_limit,
            telemetry=telemetry,
            extra=meta,
        ),
    )
