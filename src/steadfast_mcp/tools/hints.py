"""MCP tool behaviour hints derived from the remote operation's HTTP method."""

from typing import Dict, Literal, Optional

from mcp.types import ToolAnnotations

HttpMethod = Literal["GET", "PUT", "POST", "PATCH", "DELETE"]

_IDEMPOTENT = frozenset({"GET", "PUT", "DELETE"})


def tool_hints(method: str) -> Dict[str, bool]:
    """Hints letting a client reason about a tool's impact.

    GET is read-only, DELETE is destructive, and GET/PUT/DELETE are
    idempotent.
    """
    verb = method.strip().upper()
    return {
        "readOnlyHint": verb == "GET",
        "destructiveHint": verb == "DELETE",
        "idempotentHint": verb in _IDEMPOTENT,
    }


def tool_annotations(method: str, title: Optional[str] = None) -> ToolAnnotations:
    """Same hints as ``tool_hints`` wrapped for ``FastMCP.tool(annotations=...)``."""
    return ToolAnnotations(title=title, **tool_hints(method))
