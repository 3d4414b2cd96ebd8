"""
Standard response contracts for MCP tool operations.

Sub-modules:
    types     - ErrorCode, ErrorType, ToolResponse, _build_meta
    builders  - success_response, error_response
    insights  - insight_response, governed_response
"""

# --- Core types ---
from steadfast_mcp.core.responses.types import (  # noqa: F401
    ErrorCode,
    ErrorType,
    ToolResponse,
    _build_meta,
)

# --- Response builders ---
from steadfast_mcp.core.responses.builders import (  # noqa: F401
    error_response,
    success_response,
)

# --- Engine envelopes ---
from steadfast_mcp.core.responses.insights import (  # noqa: F401
    CONTENT_FIDELITY,
    INSIGHT_ERROR_MAP,
    governed_response,
    insight_response,
)
