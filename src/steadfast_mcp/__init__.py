"""steadfast-mcp: reliability middleware for MCP tool handlers."""

from steadfast_mcp.config import _PACKAGE_VERSION

__version__ = _PACKAGE_VERSION
