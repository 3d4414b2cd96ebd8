"""
Bounded fan-out for accessor calls.

Batch verification confirms many resources at once. Each check is an
independent remote call; they run concurrently but never more than
``max_concurrent`` at a time, and one failing check never cancels the rest.

Example:
    limiter = ConcurrencyLimiter(max_concurrent=4, name="verify_batch")
    outcome = await limiter.gather([verify_deleted(a) for a in accessors])
    for value, error in zip(outcome.results, outcome.errors):
        ...
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Coroutine, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ConcurrencyStats:
    """Counters for one ``gather`` call.

    ``timed_out`` is a subset of ``failed``.
    """

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    timed_out: int = 0
    elapsed_seconds: float = 0.0


@dataclass
class GatherResult:
    """Per-item outcome of ``ConcurrencyLimiter.gather``.

    ``results[i]`` and ``errors[i]`` belong to the i-th input coroutine;
    exactly one of them is meaningful (a failed item has result None).
    """

    results: List[Any] = field(default_factory=list)
    errors: List[Optional[BaseException]] = field(default_factory=list)
    stats: ConcurrencyStats = field(default_factory=ConcurrencyStats)

    @property
    def all_succeeded(self) -> bool:
        return not self.stats.failed


class ConcurrencyLimiter:
    """Semaphore-backed cap on in-flight coroutines.

    Args:
        max_concurrent: Slots available at once (at least 1)
        name: Label used in log messages
        timeout: Default per-item timeout in seconds, None for no limit
    """

    def __init__(
        self,
        max_concurrent: int = 4,
        *,
        name: str = "",
        timeout: Optional[float] = None,
    ):
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {max_concurrent}")
        self.max_concurrent = max_concurrent
        self.name = name or "limiter"
        self.timeout = timeout
        self._slots = asyncio.Semaphore(max_concurrent)
        self._in_flight = 0

    @property
    def active_count(self) -> int:
        """Coroutines currently holding a slot."""
        return self._in_flight

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[None]:
        async with self._slots:
            self._in_flight += 1
            try:
                yield
            finally:
                self._in_flight -= 1

    async def run(self, coro: Coroutine[Any, Any, T], *, timeout: Optional[float] = None) -> T:
        """Await ``coro`` inside a slot, bounded by ``timeout`` if set."""
        limit = self.timeout if timeout is None else timeout
        async with self.acquire():
            return await asyncio.wait_for(coro, timeout=limit)

    async def gather(
        self,
        coros: List[Coroutine[Any, Any, T]],
        *,
        timeout: Optional[float] = None,
    ) -> GatherResult:
        """Run every coroutine and collect results and errors in input order."""
        outcome = GatherResult(
            results=[None] * len(coros),
            errors=[None] * len(coros),
            stats=ConcurrencyStats(total=len(coros)),
        )
        stats = outcome.stats
        started = time.monotonic()

        async def settle(index: int, coro: Coroutine[Any, Any, T]) -> None:
            try:
                outcome.results[index] = await self.run(coro, timeout=timeout)
            except Exception as exc:
                outcome.errors[index] = exc
                stats.failed += 1
                if isinstance(exc, asyncio.TimeoutError):
                    stats.timed_out += 1
            else:
                stats.succeeded += 1

        try:
            await asyncio.gather(*(settle(i, c) for i, c in enumerate(coros)))
        finally:
            stats.elapsed_seconds = time.monotonic() - started

        if stats.failed:
            logger.debug("%s: %d of %d items failed", self.name, stats.failed, stats.total)
        return outcome


async def gather_limited(
    coros: List[Coroutine[Any, Any, T]],
    max_concurrent: int = 4,
    *,
    timeout: Optional[float] = None,
) -> GatherResult:
    """Fan out ``coros`` through a throwaway limiter."""
    limiter = ConcurrencyLimiter(max_concurrent=max_concurrent, name="gather_limited")
    return await limiter.gather(coros, timeout=timeout)
