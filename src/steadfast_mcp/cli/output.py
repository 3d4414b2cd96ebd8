"""JSON output helpers for CLI commands.

Every command prints exactly one response-v2 envelope on stdout so the CLI
can be scripted the same way the MCP tools are consumed.
"""

import json
import sys
from dataclasses import asdict
from typing import Any, Mapping, NoReturn, Optional

import click

from steadfast_mcp.core.responses import ToolResponse, error_response, success_response


def emit(response: ToolResponse) -> None:
    """Print a ToolResponse as indented JSON."""
    click.echo(json.dumps(asdict(response), indent=2, default=str, ensure_ascii=False))


def emit_success(data: Mapping[str, Any], **meta: Any) -> None:
    extra = {key: value for key, value in meta.items() if value is not None}
    emit(success_response(data, meta=extra or None))


def emit_error(
    message: str,
    *,
    code: str = "INTERNAL_ERROR",
    error_type: str = "internal",
    remediation: Optional[str] = None,
    details: Optional[Mapping[str, Any]] = None,
) -> NoReturn:
    """Print an error envelope and exit with status 1."""
    emit(
        error_response(
            message,
            error_code=code,
            error_type=error_type,
            remediation=remediation,
            details=details,
        )
    )
    sys.exit(1)
