"""Response governance: keep tool output within client context budgets."""

from steadfast_mcp.core.governance.formats import ESSENTIAL_FIELDS, apply_format
from steadfast_mcp.core.governance.governor import govern
from steadfast_mcp.core.governance.models import (
    DEFAULT_MAX_CHARS,
    DEFAULT_MAX_ITEMS,
    DEFAULT_SUMMARIZER_TIMEOUT,
    DEFAULT_SUMMARY_MAX_TOKENS,
    DEFAULT_THRESHOLD_BYTES,
    GovernanceBudget,
    GovernedResponse,
    ResponseFormat,
    ResponseMode,
)
from steadfast_mcp.core.governance.summarizers import (
    CallableSummarizer,
    HttpSummarizer,
    NullSummarizer,
    Summarizer,
)
from steadfast_mcp.core.governance.truncation import (
    TRUNCATION_MARKER,
    serialize,
    trim_wrapper_arrays,
    truncate_array,
    truncate_text,
)

__all__ = [
    # Engine
    "govern",
    "apply_format",
    "ESSENTIAL_FIELDS",
    # Models
    "GovernanceBudget",
    "GovernedResponse",
    "ResponseFormat",
    "ResponseMode",
    "DEFAULT_THRESHOLD_BYTES",
    "DEFAULT_MAX_CHARS",
    "DEFAULT_MAX_ITEMS",
    "DEFAULT_SUMMARY_MAX_TOKENS",
    "DEFAULT_SUMMARIZER_TIMEOUT",
    # Summarizers
    "Summarizer",
    "NullSummarizer",
    "CallableSummarizer",
    "HttpSummarizer",
    # Truncation
    "TRUNCATION_MARKER",
    "serialize",
    "trim_wrapper_arrays",
    "truncate_array",
    "truncate_text",
]
