"""Error classification engine.

Turns an arbitrary remote failure into an ``Insight``:

1. Default to ``NETWORK`` (no status means the request never got an answer).
2. Map well-known HTTP statuses (429/503, 401/403, 404, 409).
3. Run the ordered message heuristics, which may override the code.

``classify`` is total: it never raises and always returns a populated
Insight, so tool handlers can use it as the terminal sink for failures.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional, Sequence

from steadfast_mcp.core.insights.heuristics import DEFAULT_HEURISTICS, Heuristic
from steadfast_mcp.core.insights.models import Insight, InsightCode
from steadfast_mcp.core.observability import get_metrics, redact_sensitive_data

logger = logging.getLogger(__name__)

RETRY_AFTER_HEADERS = ("Retry-After", "retry-after", "retry-after-ms", "x-ms-retry-after-ms")

_STATUS_RULES: Mapping[int, tuple[InsightCode, str]] = {
    429: (
        InsightCode.RATE_LIMIT,
        "Back off with jitter. When creating objects you may also be at tier/object limits "
        "or low on storage: reduce request rate, delete unused objects, or upgrade the SKU.",
    ),
    503: (
        InsightCode.RATE_LIMIT,
        "Back off with jitter. When creating objects you may also be at tier/object limits "
        "or low on storage: reduce request rate, delete unused objects, or upgrade the SKU.",
    ),
    401: (
        InsightCode.AUTH,
        "Use a credential with management scope (admin key or RBAC role) for this operation; "
        "verify network access and token audience.",
    ),
    403: (
        InsightCode.AUTH,
        "Use a credential with management scope (admin key or RBAC role) for this operation; "
        "verify network access and token audience.",
    ),
    404: (
        InsightCode.NOT_FOUND,
        "List resources first and correct the name; the resource likely does not exist.",
    ),
    409: (
        InsightCode.CONFLICT,
        "Serialize management operations and retry with exponential backoff.",
    ),
}

_NETWORK_RECOMMENDATION = "Check connectivity, endpoint, or service availability."


def _coerce_status(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _lookup(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def extract_status(error: Any) -> Optional[int]:
    """Find a numeric HTTP status on an error or on its attached response.

    Accepts ``status_code`` / ``statusCode`` / ``status`` on the error itself,
    then the same on ``error.response`` (httpx ``HTTPStatusError`` included).
    """
    for holder in (error, _lookup(error, "response")):
        if holder is None:
            continue
        for name in ("status_code", "statusCode", "status"):
            status = _coerce_status(_lookup(holder, name))
            if status is not None:
                return status
    return None


def _header(headers: Any, name: str) -> Any:
    getter = getattr(headers, "get", None)
    if getter is None:
        return None
    value = getter(name)
    if value is None and isinstance(headers, Mapping):
        lowered = name.lower()
        for key, candidate in headers.items():
            if str(key).lower() == lowered:
                return candidate
    return value


def parse_retry_after(value: Any, *, milliseconds: bool = False) -> Optional[int]:
    """Convert a retry header value to whole seconds.

    ``"5"`` is five seconds; ``"2000ms"`` (or any value when ``milliseconds``
    is set) is ceiling-divided to seconds. Unparseable values give ``None``.
    """
    if value is None:
        return None
    text = str(value).strip().lower()
    if text.endswith("ms"):
        milliseconds = True
        text = text[:-2].strip()
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number) or number < 0:
        return None
    if milliseconds:
        return math.ceil(number / 1000)
    return math.ceil(number)


def extract_retry_after(error: Any) -> Optional[int]:
    """Read the provider retry header from the error's response (or the error)."""
    for holder in (_lookup(error, "response"), error):
        if holder is None:
            continue
        headers = _lookup(holder, "headers")
        if headers is None:
            continue
        for name in RETRY_AFTER_HEADERS:
            raw = _header(headers, name)
            if raw is not None:
                return parse_retry_after(raw, milliseconds=name.endswith("-ms"))
    return None


def _message_of(error: Any) -> str:
    try:
        message = _lookup(error, "message")
        if not message:
            message = str(error)
        return str(redact_sensitive_data(str(message)))
    except Exception:
        return f"Unrepresentable {type(error).__name__}"


def classify(
    raw_error: Any,
    context: Optional[Mapping[str, Any]] = None,
    *,
    heuristics: Optional[Sequence[Heuristic]] = None,
) -> Insight:
    """Classify a remote failure into an Insight.

    Args:
        raw_error: Any failure value (exception, response-like object, dict)
        context: Free-form diagnostic context merged into ``extras``
        heuristics: Override the default ordered heuristic list

    Returns:
        A populated, immutable Insight. Never raises.
    """
    try:
        return _classify(raw_error, context or {}, DEFAULT_HEURISTICS if heuristics is None else heuristics)
    except Exception as exc:
        logger.exception("Error classification failed; falling back to NETWORK")
        return Insight(
            ok=False,
            code=InsightCode.NETWORK,
            message=_message_of(raw_error),
            recommendation=_NETWORK_RECOMMENDATION,
            extras={"classification_error": type(exc).__name__},
        )


def _classify(raw_error: Any, context: Mapping[str, Any], heuristics: Sequence[Heuristic]) -> Insight:
    status = extract_status(raw_error)
    message = _message_of(raw_error)

    extras: dict[str, Any] = {}
    if status is not None:
        extras["status"] = status
    error_code = _lookup(raw_error, "code")
    if isinstance(error_code, str) and error_code:
        extras["code"] = error_code
    extras.update(redact_sensitive_data(dict(context)))

    code, recommendation = _STATUS_RULES.get(status, (InsightCode.NETWORK, _NETWORK_RECOMMENDATION))
    retry_after = extract_retry_after(raw_error) if code == InsightCode.RATE_LIMIT else None
    source = "status" if status in _STATUS_RULES else "default"

    for heuristic in heuristics:
        if heuristic.matches(message):
            logger.debug(
                "Heuristic %s overrode %s with %s",
                heuristic.name,
                code.value,
                heuristic.override.code.value,
                extra={"heuristic": heuristic.name, "provider_specific": heuristic.provider_specific},
            )
            code = heuristic.override.code
            recommendation = heuristic.override.recommendation
            source = f"heuristic:{heuristic.name}"

    if not source.startswith("heuristic"):
        logger.debug("Classified status=%s as %s via %s", status, code.value, source)

    get_metrics().counter("insights.classified", labels={"code": code.value, "source": source})

    return Insight(
        ok=False,
        code=code,
        message=message,
        recommendation=recommendation,
        retry_after_seconds=retry_after,
        extras=extras,
    )
