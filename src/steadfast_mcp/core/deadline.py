"""Single-deadline time budgets for an outer operation.

A ``Deadline`` is computed once when a tool invocation starts and then handed
to every step that may suspend (poll waits, summarizer calls, elicitation
prompts). Each step caps its own timeout with ``Deadline.cap`` so the sum of
waits can never exceed the caller's overall budget.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Optional


@dataclass(frozen=True)
class Deadline:
    """Absolute point on the monotonic clock after which work must stop.

    Attributes:
        expires_at: Monotonic timestamp (seconds) of expiry, or None for unbounded
        clock: Monotonic clock used for all comparisons (injectable for tests)
    """

    expires_at: Optional[float] = None
    clock: Callable[[], float] = field(default=time.monotonic, repr=False, compare=False)

    @classmethod
    def after(cls, seconds: Optional[float], *, clock: Callable[[], float] = time.monotonic) -> "Deadline":
        """Create a deadline ``seconds`` from now (None means no deadline)."""
        if seconds is None:
            return cls(None, clock)
        return cls(clock() + max(0.0, seconds), clock)

    @classmethod
    def unbounded(cls) -> "Deadline":
        return cls(None)

    def remaining(self) -> Optional[float]:
        """Seconds left before expiry, floored at zero; None when unbounded."""
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - self.clock())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0.0

    def cap(self, timeout: Optional[float]) -> Optional[float]:
        """Return the smaller of ``timeout`` and the remaining budget."""
        remaining = self.remaining()
        if remaining is None:
            return timeout
        if timeout is None:
            return remaining
        return min(timeout, remaining)
