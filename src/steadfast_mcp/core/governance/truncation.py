"""Deterministic truncation used when a payload is over budget.

Three shapes are handled:

- arrays become a preview envelope with pagination guidance
- wrapper objects (``{"value": [...]}``, ``{"executionHistory": [...]}``)
  have their well-known arrays trimmed in place
- anything else (and anything still too long) is cut as text with a marker
  recording how many characters were dropped

Every function here guarantees its serialized output is strictly shorter
than the ``max_chars`` it was given.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

TRUNCATION_MARKER = "\n…[truncated {count} chars]"

PAGINATION_RECOMMENDATION = "Use skip and top parameters to paginate through results."

# Wrapper keys whose arrays are trimmed, with a per-key cap (None = budget.max_items)
WRAPPER_ARRAY_LIMITS: Mapping[str, Optional[int]] = {
    "value": None,
    "items": None,
    "results": None,
    "errors": None,
    "warnings": None,
    "executionHistory": 5,
    "execution_history": 5,
}


def serialize(payload: Any) -> str:
    """Serialize a payload the way it will be measured and shipped.

    Strings pass through unchanged; everything else is JSON with
    non-serializable values rendered via ``str``.
    """
    if isinstance(payload, str):
        return payload
    return json.dumps(payload, default=str, ensure_ascii=False)


def size_in_bytes(text: str) -> int:
    return len(text.encode("utf-8"))


def truncate_text(text: str, max_chars: int) -> Tuple[str, int]:
    """Cut ``text`` so the result (marker included) is shorter than ``max_chars``.

    Returns:
        Tuple of (possibly truncated text, number of characters dropped)
    """
    if len(text) < max_chars:
        return text, 0
    # Size the marker for the worst case so the final length is fixed up front
    reserve = len(TRUNCATION_MARKER.format(count=len(text)))
    keep = max(0, max_chars - 1 - reserve)
    dropped = len(text) - keep
    return text[:keep] + TRUNCATION_MARKER.format(count=dropped), dropped


def truncate_array(
    items: Sequence[Any],
    max_items: int,
    max_chars: int,
) -> Tuple[Optional[Dict[str, Any]], int]:
    """Build a preview envelope for an oversized array.

    The preview starts at ``max_items`` items and halves until it fits. When
    even an empty preview does not fit, returns ``(None, 0)`` and the caller
    falls back to text truncation.

    Returns:
        Tuple of (envelope or None, number of items elided)
    """
    total = len(items)
    keep = min(max_items, total)
    while True:
        envelope = {
            "items": list(items[:keep]),
            "total_items": total,
            "elided_items": total - keep,
            "truncated": True,
            "recommendation": PAGINATION_RECOMMENDATION,
        }
        if len(serialize(envelope)) < max_chars:
            return envelope, total - keep
        if keep == 0:
            return None, 0
        keep //= 2


def trim_wrapper_arrays(obj: Mapping[str, Any], max_items: int) -> Tuple[Dict[str, Any], int]:
    """Trim the well-known arrays of a wrapper object.

    The input is not modified. Each trimmed key is recorded under
    ``"_truncated"`` with its original length.

    Returns:
        Tuple of (trimmed copy, total number of items elided)
    """
    result = dict(obj)
    originals: Dict[str, int] = {}
    elided = 0
    for key, limit in WRAPPER_ARRAY_LIMITS.items():
        value = result.get(key)
        if not isinstance(value, (list, tuple)):
            continue
        cap = max_items if limit is None else min(limit, max_items)
        if len(value) > cap:
            originals[key] = len(value)
            elided += len(value) - cap
            result[key] = list(value[:cap])
    if originals:
        result["_truncated"] = originals
    return result, elided
