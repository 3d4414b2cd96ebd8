"""Unified error hierarchy for steadfast-mcp.

All custom exception classes are defined in domain-specific modules within
this package. This __init__.py re-exports everything for convenient access.

Usage:
    from steadfast_mcp.core.errors import SummarizationError, TimeoutException
"""

# --- Elicitation errors ---
from steadfast_mcp.core.errors.elicitation import (
    ElicitationError,
    ElicitationUnsupportedError,
)

# --- Resilience errors ---
from steadfast_mcp.core.errors.resilience import (
    DeadlineError,
    TimeBudgetExceededError,
    TimeoutException,
)

# --- Summarization errors ---
from steadfast_mcp.core.errors.summarization import (
    SummarizationError,
    SummarizerResponseError,
    SummarizerUnavailableError,
)

__all__ = [
    # Elicitation errors
    "ElicitationError",
    "ElicitationUnsupportedError",
    # Resilience errors
    "DeadlineError",
    "TimeoutException",
    "TimeBudgetExceededError",
    # Summarization errors
    "SummarizationError",
    "SummarizerUnavailableError",
    "SummarizerResponseError",
]
