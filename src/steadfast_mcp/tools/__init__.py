"""Tool-facing helpers: the invocation executor and MCP behaviour hints."""

from steadfast_mcp.tools.executor import (
    ToolExecutor,
    missing_parameters_response,
    run_with_deadline,
)
from steadfast_mcp.tools.hints import tool_annotations, tool_hints

__all__ = [
    "ToolExecutor",
    "missing_parameters_response",
    "run_with_deadline",
    "tool_annotations",
    "tool_hints",
]
