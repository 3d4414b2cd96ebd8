"""Message-pattern heuristics for error classification.

Remote control planes reuse a handful of HTTP statuses (mostly 400) for very
different failures. These heuristics scan the human-readable error text and
override the status-derived code when a domain-specific failure is
recognised.

Heuristics are evaluated in order; every match overrides the previous code,
so the last matching entry wins. Add or remove entries here without touching
the classifier's control flow.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List

from steadfast_mcp.core.insights.models import InsightCode

MessagePredicate = Callable[[str], bool]


@dataclass(frozen=True)
class InsightOverride:
    """Replacement code and recommendation applied when a heuristic fires."""

    code: InsightCode
    recommendation: str


@dataclass(frozen=True)
class Heuristic:
    """A named ``(predicate, override)`` pair.

    Attributes:
        name: Identifier used in logs when the heuristic fires
        predicate: Callable that receives the raw error message
        override: Code and recommendation to apply on match
        provider_specific: True when the pattern keys on one upstream's wording
    """

    name: str
    predicate: MessagePredicate
    override: InsightOverride
    provider_specific: bool = False

    def matches(self, message: str) -> bool:
        return self.predicate(message)


def any_pattern(*patterns: str) -> MessagePredicate:
    """Predicate that matches when any pattern is found (case-insensitive)."""
    compiled = [re.compile(p, re.IGNORECASE) for p in patterns]
    return lambda message: any(c.search(message) for c in compiled)


def all_patterns(*patterns: str) -> MessagePredicate:
    """Predicate that matches when every pattern is found (case-insensitive)."""
    compiled = [re.compile(p, re.IGNORECASE) for p in patterns]
    return lambda message: all(c.search(message) for c in compiled)


DEFAULT_HEURISTICS: List[Heuristic] = [
    Heuristic(
        name="downtime_required",
        predicate=any_pattern(r"allowIndexDowntime", r"(analyzer|tokenizer|vectorizer).+cannot"),
        override=InsightOverride(
            InsightCode.DOWNTIME_REQUIRED,
            "Retry the index update with allow_index_downtime=True, or plan a rebuild "
            "and alias swap for breaking schema changes.",
        ),
    ),
    Heuristic(
        name="vector_dimension_mismatch",
        predicate=all_patterns(r"dimension", r"vector"),
        override=InsightOverride(
            InsightCode.VECTOR_DIM_MISMATCH,
            "Make the field's vector dimensions equal the embedding length; "
            "regenerate embeddings or fix the schema.",
        ),
    ),
    Heuristic(
        name="bad_filter",
        predicate=any_pattern(r"Invalid expression", r"\$filter"),
        override=InsightOverride(
            InsightCode.BAD_FILTER,
            "Fix the filter syntax: balance parentheses, use any/all for collections, "
            "and prefer search.in(...) for set membership.",
        ),
    ),
    Heuristic(
        name="storage_limit",
        predicate=any_pattern(
            r"storage (quota|limit)",
            r"out of storage",
            r"insufficient storage",
            r"exceed(s|ed)? .{0,40}storage",
        ),
        override=InsightOverride(
            InsightCode.STORAGE_LIMIT,
            "Delete unused documents or indexes to free storage, or add partitions / upgrade the SKU.",
        ),
    ),
    Heuristic(
        name="tier_limit",
        predicate=any_pattern(
            r"tier limit",
            r"(maximum|max) (number of )?(indexes|indexers|data ?sources|skillsets|synonym maps|objects)",
            r"object (count|quota|limit)",
        ),
        override=InsightOverride(
            InsightCode.TIER_LIMIT,
            "Delete unused objects or move to a higher tier; the current tier caps how many can exist.",
        ),
    ),
    # Wording comes from one provider's free tier; not a general contract.
    Heuristic(
        name="indexer_cooldown",
        predicate=any_pattern(r"Indexer invocation is once every \d+ seconds"),
        override=InsightOverride(
            InsightCode.INDEXER_COOLDOWN,
            "Wait about 180 seconds between indexer runs on the free tier, or upgrade to a paid tier.",
        ),
        provider_specific=True,
    ),
]
