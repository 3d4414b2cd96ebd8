"""Parsing helpers for configuration values."""

import logging
import os
from typing import Any, Optional

logger = logging.getLogger(__name__)

ENV_PREFIX = "STEADFAST_MCP_"


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def _env(name: str) -> Optional[str]:
    """Read ``STEADFAST_MCP_<name>``; empty strings count as unset."""
    value = os.environ.get(f"{ENV_PREFIX}{name}")
    return value if value else None


def _env_float(name: str) -> Optional[float]:
    raw = _env(name)
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring %s%s=%r: not a number", ENV_PREFIX, name, raw)
        return None


def _env_int(name: str) -> Optional[int]:
    raw = _env(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s%s=%r: not an integer", ENV_PREFIX, name, raw)
        return None
