"""Loading logic mixed into ``ServerConfig``.

Sources are applied in increasing priority, each overriding the previous:

1. field defaults
2. ``$XDG_CONFIG_HOME/steadfast-mcp/config.toml``
3. ``~/.steadfast-mcp.toml``
4. ``./steadfast-mcp.toml`` (or ``./.steadfast-mcp.toml``)
5. ``STEADFAST_MCP_*`` environment variables

An explicit file (argument or ``STEADFAST_MCP_CONFIG_FILE``) replaces steps
2 to 4. Unreadable files are logged and skipped; loading never raises.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterator, List, Optional, Tuple, cast

if TYPE_CHECKING:
    from steadfast_mcp.config.server import ServerConfig

from steadfast_mcp.config.domains import (
    ElicitationConfig,
    GovernanceConfig,
    SummarizerConfig,
    VerificationConfig,
)
from steadfast_mcp.config.parsing import _env, _env_float, _env_int, _parse_bool

logger = logging.getLogger(__name__)

CONFIG_NAME = "steadfast-mcp"

_SECTIONS = {
    "governance": GovernanceConfig,
    "verification": VerificationConfig,
    "elicitation": ElicitationConfig,
    "summarizer": SummarizerConfig,
}


def _env_bool(name: str) -> Optional[bool]:
    raw = _env(name)
    return None if raw is None else _parse_bool(raw)


# (variable suffix, engine section or None for top level, attribute, reader)
_ENV_OVERRIDES: List[Tuple[str, Optional[str], str, Callable[[str], Any]]] = [
    ("STRUCTURED_LOGGING", None, "structured_logging", _env_bool),
    ("TOOL_TIMEOUT", None, "tool_timeout", _env_float),
    ("GOVERNANCE_THRESHOLD_BYTES", "governance", "threshold_bytes", _env_int),
    ("GOVERNANCE_MAX_CHARS", "governance", "max_chars", _env_int),
    ("GOVERNANCE_MAX_ITEMS", "governance", "max_items", _env_int),
    ("GOVERNANCE_SUMMARY_MAX_TOKENS", "governance", "summary_max_tokens", _env_int),
    ("GOVERNANCE_SUMMARIZER_TIMEOUT", "governance", "summarizer_timeout", _env_float),
    ("VERIFY_MUTATIONS", "verification", "verify_mutations", _env_bool),
    ("POLL_INTERVAL", "verification", "poll_interval", _env_float),
    ("POLL_TIMEOUT", "verification", "poll_timeout", _env_float),
    ("VERIFY_MAX_CONCURRENT", "verification", "max_concurrent", _env_int),
    ("ELICITATION_ENABLED", "elicitation", "enabled", _env_bool),
    ("ELICITATION_TIMEOUT", "elicitation", "timeout", _env_float),
    ("SUMMARIZER_ENABLED", "summarizer", "enabled", _env_bool),
    ("SUMMARIZER_ENDPOINT", "summarizer", "endpoint", _env),
    ("SUMMARIZER_API_KEY", "summarizer", "api_key", _env),
    ("SUMMARIZER_MODEL", "summarizer", "model", _env),
    ("SUMMARIZER_DEPLOYMENT", "summarizer", "deployment", _env),
    ("SUMMARIZER_API_VERSION", "summarizer", "api_version", _env),
    ("SUMMARIZER_TIMEOUT", "summarizer", "timeout", _env_float),
]


def _discovered_files() -> Iterator[Path]:
    """Default config files that exist, lowest priority first."""
    xdg_home = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
    candidates = [
        xdg_home / CONFIG_NAME / "config.toml",
        Path.home() / f".{CONFIG_NAME}.toml",
    ]
    project = Path(f"{CONFIG_NAME}.toml")
    candidates.append(project if project.exists() else Path(f".{CONFIG_NAME}.toml"))
    return (path for path in candidates if path.exists())


class _ServerConfigLoader:
    """Mixin providing ``from_env`` and its helpers; ``self`` is a ``ServerConfig``."""

    if TYPE_CHECKING:

        def __init_subclass__(cls, **kwargs: Any) -> None: ...

        log_level: str
        structured_logging: bool
        server_name: str
        server_version: str
        tool_timeout: float
        governance: GovernanceConfig
        verification: VerificationConfig
        elicitation: ElicitationConfig
        summarizer: SummarizerConfig
        startup_warnings: List[str]

        def _add_startup_warning(self, message: str) -> None: ...

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "ServerConfig":
        """Build a config from TOML files and ``STEADFAST_MCP_*`` variables."""
        config = cls()

        explicit = config_file or _env("CONFIG_FILE")
        paths = [Path(explicit)] if explicit else list(_discovered_files())
        for path in paths:
            config._load_toml(path)

        config._load_env()
        config._validate_startup_configuration()
        return cast("ServerConfig", config)

    def _load_toml(self, path: Path) -> None:
        if not path.exists():
            logger.warning("Config file not found: %s", path)
            return
        try:
            with open(path, "rb") as fh:
                data = tomllib.load(fh)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            logger.error("Error loading config file %s: %s", path, exc)
            return
        logger.debug("Loaded config from %s", path)

        log = data.get("logging", {})
        if "level" in log:
            self.log_level = str(log["level"]).upper()
        if "structured" in log:
            self.structured_logging = _parse_bool(log["structured"])

        server = data.get("server", {})
        self.server_name = server.get("name", self.server_name)
        self.server_version = server.get("version", self.server_version)
        if "tool_timeout" in server:
            try:
                self.tool_timeout = float(server["tool_timeout"])
            except (TypeError, ValueError):
                logger.error("Ignoring [server] tool_timeout in %s: not a number", path)

        for section, config_cls in _SECTIONS.items():
            if section not in data:
                continue
            try:
                setattr(self, section, config_cls.from_toml_dict(data[section]))
            except (AttributeError, TypeError, ValueError) as exc:
                logger.error("Ignoring [%s] in %s: %s", section, path, exc)

    def _load_env(self) -> None:
        if log_level := _env("LOG_LEVEL"):
            self.log_level = log_level.upper()

        for suffix, section, attribute, read in _ENV_OVERRIDES:
            value = read(suffix)
            if value is None:
                continue
            target = getattr(self, section) if section else self
            setattr(target, attribute, value)

    def _validate_startup_configuration(self) -> None:
        """Warn about settings that silently degrade behaviour.

        Values the engines would reject are replaced by their defaults here,
        so a bad setting can never fail a tool call later.
        """
        try:
            self.governance.to_budget()
        except ValueError as exc:
            self._add_startup_warning(f"Invalid governance settings ({exc}); using defaults")
            self.governance = GovernanceConfig()
        try:
            self.verification.to_poll_config()
        except ValueError as exc:
            defaults = VerificationConfig()
            self._add_startup_warning(f"Invalid verification poll settings ({exc}); using defaults")
            self.verification.poll_interval = defaults.poll_interval
            self.verification.poll_timeout = defaults.poll_timeout
        if self.verification.max_concurrent < 1:
            self._add_startup_warning("verification.max_concurrent must be >= 1; using 1")
            self.verification.max_concurrent = 1

        if self.summarizer.enabled and not self.summarizer.is_complete:
            self._add_startup_warning(
                "Summarizer enabled but endpoint, api_key or model/deployment is missing; "
                "oversized responses will be truncated instead"
            )
        if self.governance.threshold_bytes > self.governance.max_chars:
            self._add_startup_warning(
                "governance.threshold_bytes exceeds governance.max_chars; "
                "raw responses may be longer than truncated ones"
            )
        if self.verification.poll_interval > self.verification.poll_timeout:
            self._add_startup_warning("verification.poll_interval exceeds poll_timeout; at most one poll will run")
        for warning in self.startup_warnings:
            logger.warning(warning)
