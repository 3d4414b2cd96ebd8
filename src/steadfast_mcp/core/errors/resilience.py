"""Errors raised when a tool invocation runs out of time.

Both carry the name of the operation so the classifier and the audit trail
can say what was cut off.
"""

from __future__ import annotations

from typing import Optional


class DeadlineError(Exception):
    """Base class for deadline failures."""

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation


class TimeoutException(DeadlineError):
    """A started operation did not finish within ``timeout_seconds``."""

    def __init__(
        self,
        message: str,
        timeout_seconds: Optional[float] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(message, operation)
        self.timeout_seconds = timeout_seconds


class TimeBudgetExceededError(DeadlineError):
    """The invocation budget was spent before the operation could start.

    ``elapsed_seconds`` is how much of ``budget_seconds`` had been used, when
    the caller knows it.
    """

    def __init__(
        self,
        message: str,
        budget_seconds: Optional[float] = None,
        elapsed_seconds: Optional[float] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(message, operation)
        self.budget_seconds = budget_seconds
        self.elapsed_seconds = elapsed_seconds
