"""Error classification: raw remote failures to structured Insights."""

from steadfast_mcp.core.insights.classifier import (
    classify,
    extract_retry_after,
    extract_status,
    parse_retry_after,
)
from steadfast_mcp.core.insights.heuristics import (
    DEFAULT_HEURISTICS,
    Heuristic,
    InsightOverride,
    all_patterns,
    any_pattern,
)
from steadfast_mcp.core.insights.models import Insight, InsightCode

__all__ = [
    "Insight",
    "InsightCode",
    "classify",
    "extract_status",
    "extract_retry_after",
    "parse_retry_after",
    "Heuristic",
    "InsightOverride",
    "DEFAULT_HEURISTICS",
    "any_pattern",
    "all_patterns",
]
