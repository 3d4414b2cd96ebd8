"""
Request-scoped context for steadfast-mcp.

Holds the correlation and client identifiers for the tool invocation that is
currently executing so that log lines, audit events and response envelopes
can be tied back to a single call without threading IDs through every
function signature.

Example:
    from steadfast_mcp.core.context import request_context, get_correlation_id

    async with request_context(client="client1"):
        logger.info("working on %s", get_correlation_id())
"""

import uuid
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import AsyncIterator, Optional

correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")
client_id: ContextVar[str] = ContextVar("client_id", default="anonymous")


def generate_correlation_id(prefix: str = "req") -> str:
    """Return a new correlation ID of the form ``<prefix>_<hex12>``."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def get_correlation_id() -> str:
    """Get the correlation ID for the current invocation ("" when unset)."""
    return correlation_id.get()


def get_client_id() -> str:
    """Get the client ID for the current invocation."""
    return client_id.get()


@asynccontextmanager
async def request_context(
    request_id: Optional[str] = None,
    client: Optional[str] = None,
    *,
    prefix: str = "req",
) -> AsyncIterator[str]:
    """Bind a correlation ID (and optionally a client ID) for the block.

    Yields:
        The correlation ID in effect inside the block.
    """
    rid = request_id or generate_correlation_id(prefix=prefix)
    rid_token = correlation_id.set(rid)
    client_token = client_id.set(client) if client else None
    try:
        yield rid
    finally:
        correlation_id.reset(rid_token)
        if client_token is not None:
            client_id.reset(client_token)
