"""Configuration package for steadfast-mcp.

Sub-modules:
    parsing  – Boolean and environment-variable parsing helpers
    domains  – GovernanceConfig, VerificationConfig, ElicitationConfig,
               SummarizerConfig
    server   – ServerConfig dataclass, get_config/set_config globals
    loader   – ServerConfig loading/validation mixin (_ServerConfigLoader)
"""

from steadfast_mcp.config.parsing import _parse_bool  # noqa: F401
from steadfast_mcp.config.domains import (  # noqa: F401
    ElicitationConfig,
    GovernanceConfig,
    SummarizerConfig,
    VerificationConfig,
)
from steadfast_mcp.config.server import (  # noqa: F401
    _PACKAGE_VERSION,
    ServerConfig,
    get_config,
    set_config,
)
