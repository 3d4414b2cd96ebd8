"""Insight data model.

An ``Insight`` is the classified outcome of one remote call: success, or one
of eleven failure kinds, each paired with remediation guidance a caller (or a
language model driving the tools) can act on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


class InsightCode(str, Enum):
    """Complete vocabulary of insight codes.

    No classification may produce a code outside this set.
    """

    OK = "OK"
    AUTH = "AUTH"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    RATE_LIMIT = "RATE_LIMIT"
    STORAGE_LIMIT = "STORAGE_LIMIT"
    TIER_LIMIT = "TIER_LIMIT"
    DOWNTIME_REQUIRED = "DOWNTIME_REQUIRED"
    VECTOR_DIM_MISMATCH = "VECTOR_DIM_MISMATCH"
    BAD_FILTER = "BAD_FILTER"
    INDEXER_COOLDOWN = "INDEXER_COOLDOWN"
    NETWORK = "NETWORK"


@dataclass(frozen=True)
class Insight:
    """Structured, classified outcome of a remote call.

    Attributes:
        ok: True only for ``InsightCode.OK``
        code: Classified outcome
        message: Human-readable (redacted) description
        recommendation: Actionable remediation hint, if any
        retry_after_seconds: Whole seconds to wait before retrying, if known
        extras: Diagnostic context (upstream status, operation, resource, ...)
    """

    ok: bool
    code: InsightCode
    message: str
    recommendation: Optional[str] = None
    retry_after_seconds: Optional[int] = None
    extras: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.ok != (self.code == InsightCode.OK):
            raise ValueError(f"Insight.ok={self.ok} is inconsistent with code={self.code.value}")
        object.__setattr__(self, "extras", MappingProxyType(dict(self.extras)))

    @classmethod
    def success(cls, extras: Optional[Mapping[str, Any]] = None) -> "Insight":
        return cls(ok=True, code=InsightCode.OK, message="Success", extras=extras or {})

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dict, dropping unset optional fields."""
        result: Dict[str, Any] = {
            "ok": self.ok,
            "code": self.code.value,
            "message": self.message,
        }
        if self.recommendation is not None:
            result["recommendation"] = self.recommendation
        if self.retry_after_seconds is not None:
            result["retry_after_seconds"] = self.retry_after_seconds
        if self.extras:
            result["extras"] = dict(self.extras)
        return result
