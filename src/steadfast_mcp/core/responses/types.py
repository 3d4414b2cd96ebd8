"""
Envelope types shared by every tool response.

``ToolResponse`` is the response-v2 shape: a success flag, a payload dict, an
optional error message and a ``meta`` dict that always carries the version.
Failures add an ``ErrorCode`` / ``ErrorType`` pair to the payload so clients
can branch without parsing messages.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence

from steadfast_mcp.core.context import get_correlation_id

RESPONSE_VERSION = "response-v2"


class ErrorCode(str, Enum):
    """Stable machine-readable failure codes (``data.error_code``)."""

    # caller input
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_REQUIRED = "MISSING_REQUIRED"
    INVALID_FILTER = "INVALID_FILTER"
    VECTOR_DIMENSION_MISMATCH = "VECTOR_DIMENSION_MISMATCH"

    # target resource
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # account, credentials and capacity
    UNAUTHORIZED = "UNAUTHORIZED"
    RATE_LIMITED = "RATE_LIMITED"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    TIER_LIMIT_EXCEEDED = "TIER_LIMIT_EXCEEDED"

    # service-side restrictions on when an operation may run
    DOWNTIME_REQUIRED = "DOWNTIME_REQUIRED"
    COOLDOWN_ACTIVE = "COOLDOWN_ACTIVE"

    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNAVAILABLE = "UNAVAILABLE"
    TIMEOUT = "TIMEOUT"


class ErrorType(str, Enum):
    """Coarse failure category (``data.error_type``).

    The comment on each member gives the closest HTTP status and whether a
    client should retry.
    """

    VALIDATION = "validation"  # 400, fix the input
    AUTHENTICATION = "authentication"  # 401/403, fix credentials
    NOT_FOUND = "not_found"  # 404
    CONFLICT = "conflict"  # 409, re-read state first
    RATE_LIMIT = "rate_limit"  # 429, retry after the advertised delay
    QUOTA = "quota"  # no retry until capacity is freed
    INTERNAL = "internal"  # 500, retry with backoff
    UNAVAILABLE = "unavailable"  # 503 or transport failure, retry with backoff


@dataclass
class ToolResponse:
    """One tool result in response-v2 form.

    Attributes:
        success: True when the operation completed
        data: Operation payload; failures also carry error_code/error_type here
        error: Human-readable failure message, None on success
        meta: Version, correlation ID, warnings and other envelope facts
    """

    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=lambda: {"version": RESPONSE_VERSION})


def _build_meta(
    *,
    request_id: Optional[str] = None,
    warnings: Optional[Sequence[str]] = None,
    rate_limit: Optional[Mapping[str, Any]] = None,
    telemetry: Optional[Mapping[str, Any]] = None,
    content_fidelity: Optional[str] = None,
    governance: Optional[Mapping[str, Any]] = None,
    extra: Optional[Mapping[str, Any]] = None,
    auto_inject_request_id: bool = True,
) -> Dict[str, Any]:
    """Assemble ``meta``; empty sections are left out.

    Without an explicit ``request_id`` the correlation ID of the current
    request context is used, unless ``auto_inject_request_id`` is False.
    ``extra`` is merged last and may override anything.
    """
    if request_id is None and auto_inject_request_id:
        request_id = get_correlation_id() or None

    sections = (
        ("request_id", request_id),
        ("warnings", list(warnings) if warnings else None),
        ("rate_limit", dict(rate_limit) if rate_limit else None),
        ("telemetry", dict(telemetry) if telemetry else None),
        ("content_fidelity", content_fidelity),
        ("governance", dict(governance) if governance else None),
    )
    meta: Dict[str, Any] = {"version": RESPONSE_VERSION}
    meta.update((name, value) for name, value in sections if value)
    if extra:
        meta.update(extra)
    return meta
