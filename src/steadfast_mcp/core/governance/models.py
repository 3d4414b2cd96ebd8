"""Data models for response governance."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

# Defaults tuned for MCP clients that inline tool output into a model context.
DEFAULT_THRESHOLD_BYTES = 20 * 1024
DEFAULT_MAX_CHARS = 30_000
DEFAULT_MAX_ITEMS = 10
DEFAULT_SUMMARY_MAX_TOKENS = 800
DEFAULT_SUMMARIZER_TIMEOUT = 15.0


class ResponseMode(str, Enum):
    """How a payload left the governor."""

    RAW = "raw"
    SUMMARIZED = "summarized"
    TRUNCATED = "truncated"


class ResponseFormat(str, Enum):
    """Caller-requested output shape, applied before governance.

    FULL: complete data (governed as usual)
    SUMMARY: summarize even when under the size threshold
    MINIMAL: first few items, essential fields only
    """

    FULL = "full"
    SUMMARY = "summary"
    MINIMAL = "minimal"


@dataclass(frozen=True)
class GovernanceBudget:
    """Size and time budget for one governance decision.

    Attributes:
        threshold_bytes: Serialized size at or under which payloads pass raw
        max_chars: Hard ceiling on the serialized length of truncated output
        max_items: Items kept from array-shaped data when truncating
        summary_max_tokens: Target length handed to the summarizer
        summarizer_timeout_seconds: Ceiling on a single summarizer call
    """

    threshold_bytes: int = DEFAULT_THRESHOLD_BYTES
    max_chars: int = DEFAULT_MAX_CHARS
    max_items: int = DEFAULT_MAX_ITEMS
    summary_max_tokens: int = DEFAULT_SUMMARY_MAX_TOKENS
    summarizer_timeout_seconds: float = DEFAULT_SUMMARIZER_TIMEOUT

    def __post_init__(self) -> None:
        if self.max_chars < 64:
            raise ValueError("max_chars must be at least 64")
        if self.max_items < 0:
            raise ValueError("max_items must be >= 0")


@dataclass(frozen=True)
class GovernedResponse:
    """Output of response governance.

    Attributes:
        payload: The data to return (unchanged, summary text, or truncated form)
        mode: Which path produced ``payload``
        original_size_bytes: UTF-8 size of the payload before governance
        elided_items: Array items dropped by truncation, when applicable
        elided_chars: Characters dropped by text truncation, when applicable
    """

    payload: Any
    mode: ResponseMode
    original_size_bytes: int
    elided_items: Optional[int] = None
    elided_chars: Optional[int] = None

    def metadata(self) -> Dict[str, Any]:
        """Governance facts suitable for a response ``meta`` block."""
        meta: Dict[str, Any] = {
            "mode": self.mode.value,
            "original_size_bytes": self.original_size_bytes,
        }
        if self.elided_items is not None:
            meta["elided_items"] = self.elided_items
        if self.elided_chars is not None:
            meta["elided_chars"] = self.elided_chars
        return meta
