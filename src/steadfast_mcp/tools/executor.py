"""Tool executor: one reliability wrapper per tool invocation.

Wires the engines together the way a handler uses them:

    executor = ToolExecutor(get_config())

    @mcp.tool(annotations=tool_annotations("GET"))
    async def list_indexes(format: str = "full") -> dict:
        return await executor.execute(
            "list_indexes",
            lambda: client.list_indexes(),
            response_format=format,
        )

Mutating handlers confirm their effect with ``await executor.verify("deleted",
lambda: client.get_index(name), verify=verify)``.

Failures (timeouts included) become Insight error envelopes; successes are
shaped for the requested format and governed. Every response is a plain
dict ready for the transport.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import asdict
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Sequence, Tuple, TypeVar, Union

from steadfast_mcp.config import ServerConfig
from steadfast_mcp.core.context import generate_correlation_id, get_correlation_id
from steadfast_mcp.core.deadline import Deadline
from steadfast_mcp.core.elicitation import (
    PromptSurface,
    collect,
    missing_required_fields,
)
from steadfast_mcp.core.elicitation.coordinator import SchemaLike
from steadfast_mcp.core.errors import TimeBudgetExceededError, TimeoutException
from steadfast_mcp.core.governance import (
    GovernanceBudget,
    ResponseFormat,
    Summarizer,
    apply_format,
    govern,
)
from steadfast_mcp.core.insights import classify, extract_status
from steadfast_mcp.core.observability import get_audit_logger, get_metrics
from steadfast_mcp.core.responses import (
    ErrorCode,
    ErrorType,
    ToolResponse,
    error_response,
    governed_response,
    insight_response,
)
from steadfast_mcp.core.verification import (
    Accessor,
    VerifyResult,
    poll_until_terminal,
    verify_batch as verify_many,
    verify_deleted,
    verify_exists,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CHECKS: Dict[str, Callable[[Accessor[Any]], Awaitable[VerifyResult]]] = {
    "exists": verify_exists,
    "deleted": verify_deleted,
}


async def run_with_deadline(
    operation: Callable[[], Awaitable[T]],
    deadline: Deadline,
    operation_name: str,
) -> T:
    """Await ``operation()`` within the remaining deadline.

    Raises:
        TimeBudgetExceededError: The deadline expired before the call started
        TimeoutException: The call did not finish before the deadline
    """
    remaining = deadline.remaining()
    if remaining is not None and remaining <= 0:
        raise TimeBudgetExceededError(
            f"Operation '{operation_name}' not started: time budget exhausted",
            operation=operation_name,
        )
    try:
        return await asyncio.wait_for(operation(), timeout=remaining)
    except asyncio.TimeoutError as exc:
        raise TimeoutException(
            f"Operation '{operation_name}' timed out after {remaining or 0:.1f}s",
            timeout_seconds=remaining,
            operation=operation_name,
        ) from exc


def missing_parameters_response(missing: Sequence[str], *, request_id: Optional[str] = None) -> ToolResponse:
    """Error envelope for required parameters that could not be collected."""
    return error_response(
        f"Missing required parameters: {', '.join(missing)}",
        error_code=ErrorCode.MISSING_REQUIRED,
        error_type=ErrorType.VALIDATION,
        remediation="Provide the missing parameters and call the tool again.",
        details={"missing": list(missing)},
        request_id=request_id,
    )


class ToolExecutor:
    """Runs remote operations with timeout, classification and governance.

    Attributes:
        config: Server configuration supplying budgets and timeouts
        summarizer: Summarizer used for oversized responses
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        summarizer: Optional[Summarizer] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or ServerConfig()
        self.summarizer = summarizer if summarizer is not None else self.config.summarizer.build()
        self._clock = clock

    def deadline(self, timeout_seconds: Optional[float] = None) -> Deadline:
        """Start the single deadline for one invocation."""
        seconds = timeout_seconds if timeout_seconds is not None else self.config.tool_timeout
        return Deadline.after(seconds, clock=self._clock)

    async def execute(
        self,
        tool_name: str,
        operation: Callable[[], Awaitable[Any]],
        *,
        timeout_seconds: Optional[float] = None,
        context: Optional[Mapping[str, Any]] = None,
        response_format: Union[ResponseFormat, str] = ResponseFormat.FULL,
        deadline: Optional[Deadline] = None,
    ) -> Dict[str, Any]:
        """Run ``operation`` and return a transport-ready response dict.

        Args:
            tool_name: Name used for correlation IDs, logs and metrics
            operation: Zero-argument coroutine function doing the remote call
            timeout_seconds: Overall budget; defaults to ``config.tool_timeout``
            context: Diagnostic context attached to classified failures
            response_format: ``full``, ``summary`` or ``minimal``
            deadline: Pre-computed deadline (overrides ``timeout_seconds``)
        """
        request_id = get_correlation_id() or generate_correlation_id(prefix=tool_name)
        try:
            fmt = ResponseFormat(response_format)
        except ValueError:
            allowed = ", ".join(f.value for f in ResponseFormat)
            response = error_response(
                f"Invalid response format: {response_format!r}",
                error_code=ErrorCode.VALIDATION_ERROR,
                error_type=ErrorType.VALIDATION,
                remediation=f"Use one of: {allowed}",
                request_id=request_id,
            )
            return asdict(response)

        deadline = deadline or self.deadline(timeout_seconds)
        started = self._clock()

        try:
            result = await run_with_deadline(operation, deadline, tool_name)
        except Exception as exc:
            insight = classify(exc, {"tool": tool_name, **(context or {})})
            duration_ms = self._elapsed_ms(started)
            logger.warning("Tool %s failed: %s (%s)", tool_name, insight.code.value, insight.message)
            self._record(tool_name, False, duration_ms, code=insight.code.value)
            response = insight_response(
                insight,
                request_id=request_id,
                telemetry={"duration_ms": duration_ms},
            )
            return asdict(response)

        governed = await govern(
            apply_format(result, fmt),
            self._budget(),
            summarizer=self.summarizer,
            deadline=deadline,
            force_summary=fmt is ResponseFormat.SUMMARY,
        )
        duration_ms = self._elapsed_ms(started)
        self._record(tool_name, True, duration_ms, mode=governed.mode.value)
        response = governed_response(
            governed,
            request_id=request_id,
            telemetry={"duration_ms": duration_ms},
        )
        return asdict(response)

    async def collect_arguments(
        self,
        args: Dict[str, Any],
        schema: SchemaLike,
        required: Sequence[str],
        surface: PromptSurface,
        *,
        deadline: Optional[Deadline] = None,
    ) -> Tuple[Optional[Dict[str, Any]], Optional[Dict[str, Any]]]:
        """Fill missing required arguments through elicitation.

        Returns:
            ``(arguments, None)`` when every required argument is present
            (possibly after merging elicited values), otherwise
            ``(None, error_response_dict)`` with a MISSING_REQUIRED error.
        """
        missing = missing_required_fields(args, required)
        if not missing:
            return args, None

        collected = None
        if self.config.elicitation.enabled:
            collected = await collect(
                args,
                schema,
                required,
                surface,
                self.config.elicitation.timeout,
                deadline=deadline,
            )
        if collected is None:
            return None, asdict(missing_parameters_response(missing))
        return collected, None

    async def poll(self, status_accessor: Accessor[Any], *, deadline: Optional[Deadline] = None) -> VerifyResult:
        """Poll a job with the configured interval and timeout."""
        return await poll_until_terminal(
            status_accessor,
            self.config.verification.to_poll_config(),
            deadline=deadline,
        )

    async def verify(
        self,
        kind: str,
        accessor: Accessor[Any],
        verify: Optional[bool] = None,
    ) -> Optional[VerifyResult]:
        """Confirm a mutation's effect, unless verification is switched off.

        Args:
            kind: ``exists`` after a create/update, ``deleted`` after a delete
            accessor: Zero-argument coroutine function reading the resource
            verify: The handler's ``verify`` flag; None falls back to
                ``config.verification.verify_mutations``

        Returns:
            None when verification was skipped, otherwise the VerifyResult.
            An accessor failure is reported as an unverified result.
        """
        if kind not in _CHECKS:
            raise ValueError(f"Unknown verification kind {kind!r}; expected one of {sorted(_CHECKS)}")
        enabled = self.config.verification.verify_mutations if verify is None else verify
        if not enabled:
            return None
        try:
            return await _CHECKS[kind](accessor)
        except Exception as exc:
            logger.debug("Verification of %s failed: %s", kind, type(exc).__name__)
            return VerifyResult(
                ok=False,
                verified=False,
                verify_status=extract_status(exc),
                details={"reason": "error", "error_type": type(exc).__name__},
            )

    async def verify_batch(
        self,
        kind: str,
        accessors: Mapping[str, Accessor[Any]],
    ) -> Dict[str, VerifyResult]:
        """Verify many resources at once, ``verification.max_concurrent`` at a time."""
        if kind not in _CHECKS:
            raise ValueError(f"Unknown verification kind {kind!r}; expected one of {sorted(_CHECKS)}")
        return await verify_many(
            accessors,
            _CHECKS[kind],
            max_concurrent=max(1, self.config.verification.max_concurrent),
        )

    def _budget(self) -> GovernanceBudget:
        try:
            return self.config.governance.to_budget()
        except ValueError as exc:
            logger.warning("Invalid governance settings (%s); using defaults", exc)
            return GovernanceBudget()

    def _elapsed_ms(self, started: float) -> float:
        return round((self._clock() - started) * 1000, 2)

    def _record(self, tool_name: str, success: bool, duration_ms: float, **details: Any) -> None:
        get_metrics().timer(
            "tools.duration",
            duration_ms,
            labels={"tool": tool_name, "status": "success" if success else "error"},
        )
        get_audit_logger().tool_invocation(tool_name, success=success, duration_ms=duration_ms, **details)
