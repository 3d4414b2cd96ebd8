"""Operation verification engine.

Confirms the side effects of mutating calls and tracks asynchronous jobs to a
terminal state. The verifier never talks to a remote API itself; callers hand
it zero-argument accessors (``lambda: client.get_index(name)``), which keeps
this module independent of any particular control plane.

Verification is opt-in per call: mutating handlers expose ``verify=False`` to
skip the extra round trip on latency-sensitive paths.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Mapping, Optional

from steadfast_mcp.core.concurrency import ConcurrencyLimiter
from steadfast_mcp.core.deadline import Deadline
from steadfast_mcp.core.insights import classify, extract_status
from steadfast_mcp.core.observability import audit_log, get_metrics
from steadfast_mcp.core.verification.models import (
    Accessor,
    PollConfig,
    PollState,
    SleepFunc,
    VerifyResult,
)

logger = logging.getLogger(__name__)

NOT_FOUND_STATUSES = frozenset({404, 410})

_ETAG_KEYS = ("@odata.etag", "etag", "ETag", "e_tag")
_LAST_RESULT_KEYS = ("last_result", "lastResult", "execution_result", "executionResult")


def _lookup(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def extract_etag(resource: Any) -> Optional[str]:
    """Return the resource's entity tag, if it carries one."""
    if resource is None:
        return None
    for key in _ETAG_KEYS:
        value = _lookup(resource, key)
        if value:
            return str(value)
    return None


def extract_last_result(snapshot: Any) -> Any:
    """Return the most recent execution record of a job status snapshot."""
    for key in _LAST_RESULT_KEYS:
        value = _lookup(snapshot, key)
        if value is not None:
            return value
    return None


def extract_status_text(snapshot: Any) -> str:
    """Lower-cased status string of a job status snapshot ("" if absent).

    Prefers the status of the last execution; falls back to a top-level
    ``status`` for accessors that return a flat job record.
    """
    last = extract_last_result(snapshot)
    status = _lookup(last, "status") if last is not None else None
    if status is None:
        status = _lookup(snapshot, "status")
    if status is None:
        return ""
    return str(getattr(status, "value", status)).strip().lower()


async def verify_exists(accessor: Accessor[Any]) -> VerifyResult:
    """Confirm a resource exists right after a create/update.

    Failures from the accessor propagate: existence is a precondition the
    caller already believes holds.
    """
    resource = await accessor()
    etag = extract_etag(resource)
    audit_log("verification", check="exists", verified=True, etag=etag)
    return VerifyResult(ok=True, verified=True, verify_status=200, etag=etag)


async def verify_deleted(accessor: Accessor[Any]) -> VerifyResult:
    """Confirm a resource is gone after a delete.

    Returns:
        ``ok=verified=True`` with status 404 when the accessor reports
        not-found (a 410 Gone is reported as 404 too);
        ``ok=verified=False`` with status 200 when the resource is
        still there; ``ok=verified=False`` with the observed status otherwise.
    """
    try:
        await accessor()
    except Exception as exc:
        status = extract_status(exc)
        if status in NOT_FOUND_STATUSES:
            audit_log("verification", check="deleted", verified=True, status=status)
            return VerifyResult(ok=True, verified=True, verify_status=404)
        logger.debug("Delete verification inconclusive: status=%s (%s)", status, type(exc).__name__)
        audit_log("verification", check="deleted", verified=False, status=status)
        return VerifyResult(ok=False, verified=False, verify_status=status)

    audit_log("verification", check="deleted", verified=False, status=200)
    return VerifyResult(ok=False, verified=False, verify_status=200)


def _earliest(first: Deadline, second: Optional[Deadline]) -> Deadline:
    if second is None or second.expires_at is None:
        return first
    if first.expires_at is None:
        return second
    return first if first.expires_at <= second.expires_at else second


async def poll_until_terminal(
    status_accessor: Accessor[Any],
    config: Optional[PollConfig] = None,
    *,
    deadline: Optional[Deadline] = None,
    sleep_func: Optional[SleepFunc] = None,
    clock: Callable[[], float] = time.monotonic,
) -> VerifyResult:
    """Poll a job until it reaches a terminal state or time runs out.

    Args:
        status_accessor: Zero-argument coroutine function returning a status
            snapshot (``{"last_result": {"status": "inProgress"}}`` or similar)
        config: Interval and hard timeout; defaults to ``PollConfig()``
        deadline: Outer-operation deadline; the earlier of it and the config
            timeout bounds every wait and every accessor call
        sleep_func: Injectable async sleep for tests
        clock: Monotonic clock matching ``sleep_func`` for tests

    Returns:
        VerifyResult with ``ok`` true only for a ``success`` terminal state.
        Timeouts return ``details={"reason": "timeout"}``; accessor failures
        return ``details={"reason": "error", "insight": ...}``. Never raises
        for accessor failures.
    """
    cfg = config or PollConfig()
    sleep = sleep_func or asyncio.sleep
    limit = _earliest(Deadline.after(cfg.timeout_seconds, clock=clock), deadline)
    started = clock()
    polls = 0
    last_status = ""

    while not limit.expired:
        try:
            snapshot = await asyncio.wait_for(status_accessor(), timeout=limit.remaining())
        except asyncio.TimeoutError:
            break
        except Exception as exc:
            insight = classify(exc, {"operation": "poll_until_terminal", "polls": polls})
            logger.warning("Status accessor failed during polling: %s", insight.message)
            return VerifyResult(
                ok=False,
                verified=False,
                verify_status=extract_status(exc),
                details={"reason": "error", "insight": insight.to_dict(), "polls": polls},
            )

        polls += 1
        last_status = extract_status_text(snapshot)
        state = PollState.from_status(last_status)
        if state.is_terminal:
            elapsed_ms = round((clock() - started) * 1000, 2)
            get_metrics().timer("verification.poll_duration", elapsed_ms, labels={"state": state.value})
            audit_log("poll_completed", state=state.value, polls=polls, elapsed_ms=elapsed_ms)
            return VerifyResult(
                ok=state is PollState.SUCCESS,
                verified=True,
                verify_status=200,
                details={
                    "status": last_status,
                    "state": state.value,
                    "last_result": extract_last_result(snapshot),
                    "polls": polls,
                },
            )

        wait = limit.cap(cfg.interval_seconds)
        if limit.expired or wait is None:
            break
        await sleep(wait)

    logger.info("Polling timed out after %d polls (last status %r)", polls, last_status)
    audit_log("poll_completed", state=PollState.TIMED_OUT.value, polls=polls)
    return VerifyResult(
        ok=False,
        verified=False,
        details={
            "reason": "timeout",
            "state": PollState.TIMED_OUT.value,
            "polls": polls,
            "last_status": last_status,
        },
    )


async def verify_batch(
    accessors: Mapping[str, Accessor[Any]],
    check: Callable[[Accessor[Any]], Any] = verify_deleted,
    *,
    max_concurrent: int = 4,
) -> dict[str, VerifyResult]:
    """Run one verification per named accessor with bounded concurrency.

    A check that raises (``verify_exists`` propagates accessor failures) is
    reported as an unverified result carrying the observed status.
    """
    names = list(accessors)
    limiter = ConcurrencyLimiter(max_concurrent=max_concurrent, name="verify_batch")
    gathered = await limiter.gather([check(accessors[name]) for name in names])

    results: dict[str, VerifyResult] = {}
    for name, result, error in zip(names, gathered.results, gathered.errors):
        if error is not None:
            results[name] = VerifyResult(
                ok=False,
                verified=False,
                verify_status=extract_status(error),
                details={"reason": "error", "error_type": type(error).__name__},
            )
        else:
            results[name] = result
    return results
