"""``steadfast`` developer CLI.

Exercises the engines from a shell without an MCP client:

    steadfast classify --status 429 --retry-after-ms 2500
    steadfast classify --message "Invalid expression: \\$filter"
    steadfast govern big-response.json --max-chars 2000
    steadfast config
"""

import asyncio
import json
from dataclasses import asdict
from typing import Any, Dict, Optional, TextIO

import click

from steadfast_mcp.cli.output import emit, emit_error, emit_success
from steadfast_mcp.config import ServerConfig, set_config
from steadfast_mcp.core.governance import ResponseFormat, apply_format, govern
from steadfast_mcp.core.insights import classify
from steadfast_mcp.core.observability import redact_sensitive_data
from steadfast_mcp.core.responses import governed_response


@click.group("steadfast")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="TOML config file (default: layered lookup of steadfast-mcp.toml)",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging on stderr")
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[str], verbose: bool) -> None:
    """Reliability middleware for MCP tool handlers."""
    config = ServerConfig.from_env(config_file)
    if verbose:
        config.log_level = "DEBUG"
        config.structured_logging = False
        config.setup_logging()
    set_config(config)
    ctx.obj = config


@cli.command("classify")
@click.option("--status", type=int, help="HTTP status returned by the remote call")
@click.option("--message", default="", help="Error message text")
@click.option("--code", "error_code", help="Provider error code, if any")
@click.option("--retry-after", help="Value of the Retry-After header")
@click.option("--retry-after-ms", help="Value of the retry-after-ms header")
def classify_cmd(
    status: Optional[int],
    message: str,
    error_code: Optional[str],
    retry_after: Optional[str],
    retry_after_ms: Optional[str],
) -> None:
    """Classify a remote failure into an Insight."""
    headers: Dict[str, str] = {}
    if retry_after is not None:
        headers["Retry-After"] = retry_after
    if retry_after_ms is not None:
        headers["retry-after-ms"] = retry_after_ms

    error: Dict[str, Any] = {"message": message or (f"HTTP {status}" if status else "")}
    if status is not None:
        error["status"] = status
    if error_code:
        error["code"] = error_code
    if headers:
        error["headers"] = headers

    insight = classify(error)
    emit_success({"insight": insight.to_dict()})


@cli.command("govern")
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.option(
    "--format",
    "response_format",
    type=click.Choice([f.value for f in ResponseFormat]),
    default=ResponseFormat.FULL.value,
    show_default=True,
)
@click.option("--threshold-bytes", type=int, help="Override the raw-size threshold")
@click.option("--max-chars", type=int, help="Override the truncation ceiling")
@click.option("--max-items", type=int, help="Override the array preview length")
@click.pass_obj
def govern_cmd(
    config: ServerConfig,
    source: TextIO,
    response_format: str,
    threshold_bytes: Optional[int],
    max_chars: Optional[int],
    max_items: Optional[int],
) -> None:
    """Govern a JSON (or plain text) payload read from SOURCE ('-' for stdin)."""
    raw = source.read()
    try:
        payload: Any = json.loads(raw)
    except json.JSONDecodeError:
        payload = raw

    if threshold_bytes is not None:
        config.governance.threshold_bytes = threshold_bytes
    if max_chars is not None:
        config.governance.max_chars = max_chars
    if max_items is not None:
        config.governance.max_items = max_items

    try:
        budget = config.governance.to_budget()
    except ValueError as exc:
        emit_error(str(exc), code="VALIDATION_ERROR", error_type="validation")

    fmt = ResponseFormat(response_format)
    governed = asyncio.run(
        govern(
            apply_format(payload, fmt),
            budget,
            summarizer=config.summarizer.build(),
            force_summary=fmt is ResponseFormat.SUMMARY,
        )
    )
    emit(governed_response(governed))


@cli.command("config")
@click.pass_obj
def config_cmd(config: ServerConfig) -> None:
    """Show the effective configuration (secrets redacted)."""
    data = asdict(config)
    warnings = data.pop("startup_warnings")
    emit_success(redact_sensitive_data(data), warnings=warnings or None)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
