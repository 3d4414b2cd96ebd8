"""Prompt surfaces: the client-facing side of elicitation.

A prompt surface takes an ``ElicitationRequest`` and returns the client's
``ElicitationResponse``. Surfaces may be slow, may never answer, or may not
support elicitation at all; the coordinator bounds every call with a timeout
and treats any failure as a decline.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, runtime_checkable

from mcp import types

from steadfast_mcp.core.elicitation.models import (
    ElicitAction,
    ElicitationRequest,
    ElicitationResponse,
)
from steadfast_mcp.core.errors.elicitation import ElicitationUnsupportedError

logger = logging.getLogger(__name__)


@runtime_checkable
class PromptSurface(Protocol):
    """Anything that can ask the calling client for structured input."""

    async def prompt(self, request: ElicitationRequest) -> ElicitationResponse: ...


class NullPromptSurface:
    """Surface for clients without elicitation support; always declines."""

    async def prompt(self, request: ElicitationRequest) -> ElicitationResponse:
        return ElicitationResponse(action=ElicitAction.DECLINE)


class SessionPromptSurface:
    """Prompt through an MCP server session.

    Accepts either a low-level ``ServerSession`` or a FastMCP ``Context``
    (whose ``session`` is resolved lazily, since it is only valid inside a
    request).

    Example:
        @mcp.tool()
        async def create_index(name: str | None = None, ctx: Context = None):
            args = await collect({"name": name}, schema, ["name"],
                                 SessionPromptSurface(ctx), timeout=60)
    """

    def __init__(self, target: Any):
        self._target = target

    def _session(self) -> Any:
        session = getattr(self._target, "session", None)
        return session if session is not None else self._target

    def _related_request_id(self) -> Optional[Any]:
        if hasattr(self._target, "session"):
            return getattr(self._target, "request_id", None)
        return None

    def supports_elicitation(self) -> bool:
        session = self._session()
        check = getattr(session, "check_client_capability", None)
        if check is None:
            return False
        return bool(check(types.ClientCapabilities(elicitation=types.ElicitationCapability())))

    async def prompt(self, request: ElicitationRequest) -> ElicitationResponse:
        """Send ``elicitation/create`` and translate the result.

        Raises:
            ElicitationUnsupportedError: The client did not declare elicitation
        """
        if not self.supports_elicitation():
            raise ElicitationUnsupportedError("Client does not support elicitation")

        result = await self._session().elicit(
            request.message,
            request.requested_schema.to_json_schema(),
            related_request_id=self._related_request_id(),
        )
        logger.debug("Client answered elicitation with %s", result.action)
        return ElicitationResponse(action=ElicitAction(result.action), content=result.content)
