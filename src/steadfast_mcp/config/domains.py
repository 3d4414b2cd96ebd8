"""Domain-specific configuration dataclasses.

One small class per reliability engine. Each converts itself into the
explicit value object its engine takes, so engines never read global config.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from steadfast_mcp.config.parsing import _parse_bool
from steadfast_mcp.core.governance import (
    DEFAULT_MAX_CHARS,
    DEFAULT_MAX_ITEMS,
    DEFAULT_SUMMARIZER_TIMEOUT,
    DEFAULT_SUMMARY_MAX_TOKENS,
    DEFAULT_THRESHOLD_BYTES,
    GovernanceBudget,
    HttpSummarizer,
    NullSummarizer,
    Summarizer,
)
from steadfast_mcp.core.verification import PollConfig


@dataclass
class GovernanceConfig:
    """Response governance budget.

    Attributes:
        threshold_bytes: Serialized size at or under which payloads pass raw
        max_chars: Ceiling on truncated output length
        max_items: Array items kept when truncating
        summary_max_tokens: Target summary length
        summarizer_timeout: Seconds allowed for one summarizer call
    """

    threshold_bytes: int = DEFAULT_THRESHOLD_BYTES
    max_chars: int = DEFAULT_MAX_CHARS
    max_items: int = DEFAULT_MAX_ITEMS
    summary_max_tokens: int = DEFAULT_SUMMARY_MAX_TOKENS
    summarizer_timeout: float = DEFAULT_SUMMARIZER_TIMEOUT

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "GovernanceConfig":
        """Create config from TOML dict (typically [governance] section)."""
        return cls(
            threshold_bytes=int(data.get("threshold_bytes", DEFAULT_THRESHOLD_BYTES)),
            max_chars=int(data.get("max_chars", DEFAULT_MAX_CHARS)),
            max_items=int(data.get("max_items", DEFAULT_MAX_ITEMS)),
            summary_max_tokens=int(data.get("summary_max_tokens", DEFAULT_SUMMARY_MAX_TOKENS)),
            summarizer_timeout=float(data.get("summarizer_timeout", DEFAULT_SUMMARIZER_TIMEOUT)),
        )

    def to_budget(self) -> GovernanceBudget:
        return GovernanceBudget(
            threshold_bytes=self.threshold_bytes,
            max_chars=self.max_chars,
            max_items=self.max_items,
            summary_max_tokens=self.summary_max_tokens,
            summarizer_timeout_seconds=self.summarizer_timeout,
        )


@dataclass
class VerificationConfig:
    """Post-mutation verification and job polling.

    Attributes:
        verify_mutations: Default for handlers' ``verify`` flag
        poll_interval: Seconds between job status polls
        poll_timeout: Hard ceiling on a polling loop
        max_concurrent: Fan-out cap for batch verification
    """

    verify_mutations: bool = True
    poll_interval: float = 5.0
    poll_timeout: float = 300.0
    max_concurrent: int = 4

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "VerificationConfig":
        """Create config from TOML dict (typically [verification] section)."""
        return cls(
            verify_mutations=_parse_bool(data.get("verify_mutations", True)),
            poll_interval=float(data.get("poll_interval", 5.0)),
            poll_timeout=float(data.get("poll_timeout", 300.0)),
            max_concurrent=int(data.get("max_concurrent", 4)),
        )

    def to_poll_config(self) -> PollConfig:
        return PollConfig(interval_seconds=self.poll_interval, timeout_seconds=self.poll_timeout)


@dataclass
class ElicitationConfig:
    """Interactive parameter collection.

    Attributes:
        enabled: Ask clients for missing required parameters
        timeout: Seconds to wait for the client's answer
    """

    enabled: bool = True
    timeout: float = 60.0

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "ElicitationConfig":
        """Create config from TOML dict (typically [elicitation] section)."""
        return cls(
            enabled=_parse_bool(data.get("enabled", True)),
            timeout=float(data.get("timeout", 60.0)),
        )


@dataclass
class SummarizerConfig:
    """Chat-completions summarizer backend.

    Attributes:
        enabled: Use the summarizer for oversized responses
        endpoint: Service base URL
        api_key: Credential (prefer the environment over TOML)
        model: Model name for OpenAI-style routes
        deployment: Azure OpenAI deployment name
        api_version: Azure OpenAI API version
        timeout: HTTP timeout in seconds
    """

    enabled: bool = False
    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    model: Optional[str] = None
    deployment: Optional[str] = None
    api_version: str = "2024-08-01-preview"
    timeout: float = 15.0

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "SummarizerConfig":
        """Create config from TOML dict (typically [summarizer] section)."""
        return cls(
            enabled=_parse_bool(data.get("enabled", False)),
            endpoint=data.get("endpoint"),
            api_key=data.get("api_key"),
            model=data.get("model"),
            deployment=data.get("deployment"),
            api_version=str(data.get("api_version", "2024-08-01-preview")),
            timeout=float(data.get("timeout", 15.0)),
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.endpoint and self.api_key and (self.model or self.deployment))

    def build(self) -> Summarizer:
        """Return the configured summarizer, or a NullSummarizer."""
        if not (self.enabled and self.is_complete):
            return NullSummarizer()
        return HttpSummarizer(
            endpoint=self.endpoint or "",
            api_key=self.api_key or "",
            model=self.model,
            deployment=self.deployment,
            api_version=self.api_version,
            timeout=self.timeout,
        )
