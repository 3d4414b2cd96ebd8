"""``ServerConfig`` and the process-wide config slot.

Field declarations live here; loading lives in the ``_ServerConfigLoader``
mixin (``loader.py``). Engines never call ``get_config``: only the outer
seams (tool registration, the CLI) read it and pass explicit values inward.
"""

import logging
from dataclasses import dataclass, field
from importlib.metadata import PackageNotFoundError, version
from typing import List, Optional

from steadfast_mcp.config.domains import (
    ElicitationConfig,
    GovernanceConfig,
    SummarizerConfig,
    VerificationConfig,
)
from steadfast_mcp.config.loader import _ServerConfigLoader

try:
    _PACKAGE_VERSION = version("steadfast-mcp")
except PackageNotFoundError:
    _PACKAGE_VERSION = "0.1.0"

_LOG_FORMATS = {
    True: '{"timestamp":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
    False: "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
}


@dataclass
class ServerConfig(_ServerConfigLoader):
    """Settings for the server and its four engines."""

    log_level: str = "INFO"
    structured_logging: bool = True

    server_name: str = "steadfast-mcp"
    server_version: str = _PACKAGE_VERSION
    tool_timeout: float = 30.0

    governance: GovernanceConfig = field(default_factory=GovernanceConfig)
    verification: VerificationConfig = field(default_factory=VerificationConfig)
    elicitation: ElicitationConfig = field(default_factory=ElicitationConfig)
    summarizer: SummarizerConfig = field(default_factory=SummarizerConfig)

    startup_warnings: List[str] = field(default_factory=list, repr=False)

    def _add_startup_warning(self, message: str) -> None:
        if message and message not in self.startup_warnings:
            self.startup_warnings.append(message)

    def setup_logging(self) -> None:
        """Attach a stderr handler to the ``steadfast_mcp`` logger.

        Calling this again replaces the handler rather than stacking another.
        """
        package_logger = logging.getLogger("steadfast_mcp")
        package_logger.setLevel(getattr(logging, self.log_level, logging.INFO))

        for existing in list(package_logger.handlers):
            if getattr(existing, "_steadfast_handler", False):
                package_logger.removeHandler(existing)

        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMATS[self.structured_logging]))
        handler._steadfast_handler = True  # type: ignore[attr-defined]
        package_logger.addHandler(handler)


_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Return the process config, loading it from the environment on first use."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def set_config(config: ServerConfig) -> None:
    """Install ``config`` as the process config (CLI startup, tests)."""
    global _config
    _config = config
