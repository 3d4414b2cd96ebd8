"""Secret scrubbing for messages, audit records and log lines.

Control-plane errors often echo request fragments back: admin keys in query
strings, storage connection strings, SAS-signed URLs, bearer headers. Two
passes remove them:

- values stored under a credential-like key are replaced outright
- free text is scanned against ``SENSITIVE_PATTERNS``

Inputs are never mutated; containers are rebuilt.
"""

import json
import re
from functools import lru_cache
from typing import Any, Final, Iterable, List, Optional, Pattern, Tuple

SENSITIVE_PATTERNS: Final[List[Tuple[str, str]]] = [
    (r"(?i)\b(?:api[_-]?key|apikey)\s*[:=]\s*['\"]?[\w\-]{20,}['\"]?", "API_KEY"),
    (r"(?i)\b(?:secret[_-]?key|client[_-]?secret)\s*[:=]\s*['\"]?[\w\-]{20,}['\"]?", "SECRET_KEY"),
    (r"(?i)\b(?:access|refresh)[_-]?token\s*[:=]\s*['\"]?[\w\-.]{20,}['\"]?", "ACCESS_TOKEN"),
    (r"(?i)\bbearer\s+[\w\-.~+/]+=*", "BEARER_TOKEN"),
    (r"(?i)\b(?:password|passwd|pwd)\s*[:=]\s*['\"]?[^\s'\";]{4,}['\"]?", "PASSWORD"),
    (r"(?i)\baccountkey=[A-Za-z0-9+/=]{20,}", "ACCOUNT_KEY"),
    (r"(?i)\bsharedaccesskey=[A-Za-z0-9+/=]{20,}", "ACCOUNT_KEY"),
    (r"(?i)\b(?:sig|signature)=[A-Za-z0-9%+/=]{16,}", "SAS_SIGNATURE"),
    (r"\bAKIA[0-9A-Z]{16}\b", "AWS_ACCESS_KEY"),
    (r"-----BEGIN [A-Z ]*PRIVATE KEY-----", "PRIVATE_KEY"),
    (r"\bgh[pousr]_[A-Za-z0-9]{36,}", "GITHUB_TOKEN"),
]
"""``(regex, label)`` pairs applied to free text, in order."""

# Normalised key (lowercase, no separators) -> label used for the marker.
_KEY_LABELS: Final = {
    "apikey": "API_KEY",
    "adminkey": "API_KEY",
    "querykey": "API_KEY",
    "subscriptionkey": "API_KEY",
    "secret": "SECRET",
    "secretkey": "SECRET_KEY",
    "clientsecret": "SECRET_KEY",
    "token": "TOKEN",
    "accesstoken": "ACCESS_TOKEN",
    "refreshtoken": "ACCESS_TOKEN",
    "password": "PASSWORD",
    "passwd": "PASSWORD",
    "pwd": "PASSWORD",
    "privatekey": "PRIVATE_KEY",
    "accountkey": "ACCOUNT_KEY",
    "connectionstring": "CONNECTION_STRING",
    "authorization": "AUTHORIZATION",
    "credential": "CREDENTIAL",
    "credentials": "CREDENTIAL",
}

_KEY_SEPARATORS: Final = re.compile(r"[\s_\-.]")

MAX_DEPTH_MARKER: Final = "[MAX_DEPTH_EXCEEDED]"


@lru_cache(maxsize=16)
def _compile(patterns: Tuple[Tuple[str, str], ...]) -> Tuple[Tuple[Pattern[str], str], ...]:
    return tuple((re.compile(regex), label) for regex, label in patterns)


def _key_label(key: Any) -> Optional[str]:
    """Label for a credential-like mapping key, or None for ordinary keys."""
    return _KEY_LABELS.get(_KEY_SEPARATORS.sub("", str(key).lower()))


def _scrub_text(text: str, rules: Iterable[Tuple[Pattern[str], str]], marker: str) -> str:
    for regex, label in rules:
        text = regex.sub(marker.format(label=label), text)
    return text


def redact_sensitive_data(
    data: Any,
    *,
    patterns: Optional[List[Tuple[str, str]]] = None,
    redaction_format: str = "[REDACTED:{label}]",
    max_depth: int = 10,
) -> Any:
    """Return a scrubbed copy of ``data``.

    Strings are pattern-scanned. Mappings drop the values of credential-like
    keys (``api-key``, ``connectionString``, ...) and recurse into the rest.
    Lists and tuples recurse element-wise and keep their type. Anything else
    is returned as is.

    Nesting deeper than ``max_depth`` collapses to ``[MAX_DEPTH_EXCEEDED]``.

    Example:
        >>> redact_sensitive_data("request failed: api_key=abcdefghijklmnopqrstuvwx")
        'request failed: [REDACTED:API_KEY]'
    """
    rules = _compile(tuple(SENSITIVE_PATTERNS if patterns is None else patterns))

    def walk(value: Any, depth: int) -> Any:
        if depth <= 0:
            return MAX_DEPTH_MARKER
        if isinstance(value, str):
            return _scrub_text(value, rules, redaction_format)
        if isinstance(value, dict):
            scrubbed = {}
            for key, item in value.items():
                label = _key_label(key)
                scrubbed[key] = redaction_format.format(label=label) if label else walk(item, depth - 1)
            return scrubbed
        if isinstance(value, tuple):
            return tuple(walk(item, depth - 1) for item in value)
        if isinstance(value, list):
            return [walk(item, depth - 1) for item in value]
        return value

    return walk(data, max_depth)


def redact_for_logging(data: Any) -> str:
    """Scrub ``data`` and render it as one JSON log line."""
    scrubbed = redact_sensitive_data(data)
    try:
        return json.dumps(scrubbed, default=str)
    except (TypeError, ValueError):
        return str(scrubbed)
