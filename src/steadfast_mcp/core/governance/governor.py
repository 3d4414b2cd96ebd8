"""Response governance engine.

Decides how a successful tool result leaves the server:

1. RAW when the serialized payload is within ``threshold_bytes``
2. SUMMARIZED when a summarizer is enabled and answers within its time slice
3. TRUNCATED otherwise, deterministically and always under ``max_chars``

``govern`` never raises: summarizer failures, timeouts and even
serialization failures degrade to truncation.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from steadfast_mcp.core.deadline import Deadline
from steadfast_mcp.core.governance.models import (
    GovernanceBudget,
    GovernedResponse,
    ResponseMode,
)
from steadfast_mcp.core.governance.summarizers import NullSummarizer, Summarizer
from steadfast_mcp.core.governance.truncation import (
    serialize,
    size_in_bytes,
    trim_wrapper_arrays,
    truncate_array,
    truncate_text,
)
from steadfast_mcp.core.observability import audit_log, get_metrics

logger = logging.getLogger(__name__)


async def _try_summarize(
    text: str,
    budget: GovernanceBudget,
    summarizer: Summarizer,
    deadline: Optional[Deadline],
) -> Optional[str]:
    """Run the summarizer within its time slice; None on any failure."""
    if not summarizer.enabled:
        return None

    timeout = budget.summarizer_timeout_seconds
    if deadline is not None:
        timeout = deadline.cap(timeout)
    if timeout is not None and timeout <= 0:
        logger.debug("Skipping summarizer: no time left in the deadline")
        return None

    try:
        summary = await asyncio.wait_for(
            summarizer.summarize(text, budget.summary_max_tokens),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.warning("Summarizer timed out after %.2fs; falling back to truncation", timeout)
        get_metrics().counter("governance.summarizer_failures", labels={"reason": "timeout"})
        return None
    except Exception as exc:
        logger.warning("Summarizer failed (%s); falling back to truncation", type(exc).__name__)
        get_metrics().counter("governance.summarizer_failures", labels={"reason": "error"})
        return None

    if not isinstance(summary, str) or not summary.strip():
        logger.warning("Summarizer returned empty output; falling back to truncation")
        get_metrics().counter("governance.summarizer_failures", labels={"reason": "empty"})
        return None
    return summary


def _truncate(payload: Any, text: str, budget: GovernanceBudget, size: int) -> GovernedResponse:
    if isinstance(payload, (list, tuple)):
        envelope, elided = truncate_array(payload, budget.max_items, budget.max_chars)
        if envelope is not None:
            return GovernedResponse(envelope, ResponseMode.TRUNCATED, size, elided_items=elided)

    elif isinstance(payload, dict):
        trimmed, elided = trim_wrapper_arrays(payload, budget.max_items)
        if elided:
            trimmed_text = serialize(trimmed)
            if len(trimmed_text) < budget.max_chars:
                return GovernedResponse(trimmed, ResponseMode.TRUNCATED, size, elided_items=elided)
            cut, dropped = truncate_text(trimmed_text, budget.max_chars)
            return GovernedResponse(
                cut, ResponseMode.TRUNCATED, size, elided_items=elided, elided_chars=dropped
            )

    cut, dropped = truncate_text(text, budget.max_chars)
    return GovernedResponse(cut, ResponseMode.TRUNCATED, size, elided_chars=dropped)


def _record(result: GovernedResponse) -> GovernedResponse:
    get_metrics().counter("governance.mode", labels={"mode": result.mode.value})
    if result.mode is not ResponseMode.RAW:
        audit_log("response_governed", **result.metadata())
    return result


async def govern(
    payload: Any,
    budget: Optional[GovernanceBudget] = None,
    *,
    summarizer: Optional[Summarizer] = None,
    deadline: Optional[Deadline] = None,
    force_summary: bool = False,
) -> GovernedResponse:
    """Bound the size of a tool result.

    Args:
        payload: Successful tool result (any JSON-like value or string)
        budget: Size/time budget; defaults to ``GovernanceBudget()``
        summarizer: Best-effort summarizer; defaults to ``NullSummarizer``
        deadline: Outer-operation deadline capping the summarizer call
        force_summary: Summarize even under the threshold (``summary`` format)

    Returns:
        GovernedResponse. RAW results carry the same ``payload`` object.
    """
    budget = budget or GovernanceBudget()
    summarizer = summarizer or NullSummarizer()

    try:
        text = serialize(payload)
    except Exception as exc:
        logger.warning("Payload not serializable (%s); truncating its text form", type(exc).__name__)
        text = str(payload)
        cut, dropped = truncate_text(text, budget.max_chars)
        return _record(
            GovernedResponse(cut, ResponseMode.TRUNCATED, size_in_bytes(text), elided_chars=dropped)
        )

    size = size_in_bytes(text)
    if size <= budget.threshold_bytes and not force_summary:
        return _record(GovernedResponse(payload, ResponseMode.RAW, size))

    summary = await _try_summarize(text, budget, summarizer, deadline)
    if summary is not None:
        summary, dropped = truncate_text(summary, budget.max_chars)
        logger.debug("Summarized %d bytes into %d chars", size, len(summary))
        return _record(
            GovernedResponse(
                summary,
                ResponseMode.SUMMARIZED,
                size,
                elided_chars=dropped or None,
            )
        )

    if size <= budget.threshold_bytes:
        # Forced summary unavailable and nothing to cut
        return _record(GovernedResponse(payload, ResponseMode.RAW, size))

    try:
        result = _truncate(payload, text, budget, size)
    except Exception as exc:
        logger.warning("Shape-aware truncation failed (%s); cutting text", type(exc).__name__)
        cut, dropped = truncate_text(text, budget.max_chars)
        result = GovernedResponse(cut, ResponseMode.TRUNCATED, size, elided_chars=dropped)

    logger.info(
        "Truncated %d-byte response (elided_items=%s, elided_chars=%s)",
        size,
        result.elided_items,
        result.elided_chars,
    )
    return _record(result)
