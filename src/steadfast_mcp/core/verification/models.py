"""Data models for post-mutation verification and job polling."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol, TypeVar

T = TypeVar("T")

Accessor = Callable[[], Awaitable[T]]
"""Zero-argument coroutine function that probes remote state."""


class SleepFunc(Protocol):
    """Protocol for injectable sleep function."""

    async def __call__(self, seconds: float) -> None: ...


class PollState(str, Enum):
    """States of an asynchronous job as seen by the poller.

    ``PENDING`` is the only non-terminal state.
    """

    PENDING = "pending"
    SUCCESS = "success"
    TRANSIENT_FAILURE = "transient_failure"
    PERSISTENT_FAILURE = "persistent_failure"
    RESET = "reset"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self is not PollState.PENDING

    @classmethod
    def from_status(cls, status: str) -> "PollState":
        """Map an upstream status string onto a poll state.

        Upstream reports ``success``, ``inProgress``, ``transientFailure``,
        ``persistentFailure`` or ``reset``; matching ignores case and
        separators. Anything unrecognised is still pending.
        """
        normalized = status.strip().lower().replace("_", "").replace("-", "")
        return _STATUS_TO_STATE.get(normalized, cls.PENDING)


_STATUS_TO_STATE = {
    "success": PollState.SUCCESS,
    "transientfailure": PollState.TRANSIENT_FAILURE,
    "persistentfailure": PollState.PERSISTENT_FAILURE,
    "reset": PollState.RESET,
}


@dataclass(frozen=True)
class PollConfig:
    """Polling cadence and ceiling.

    Attributes:
        interval_seconds: Wait between status reads
        timeout_seconds: Hard ceiling on total polling time
    """

    interval_seconds: float = 5.0
    timeout_seconds: float = 300.0

    def __post_init__(self) -> None:
        if self.interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")
        if self.timeout_seconds < 0:
            raise ValueError("timeout_seconds must be >= 0")


@dataclass(frozen=True)
class VerifyResult:
    """Outcome of a post-mutation confirmation.

    ``verified=False`` means the layer could not confirm the effect (timeout,
    unexpected status); it does not mean the mutation itself failed.

    Attributes:
        ok: Whether the confirmed state is the desired one
        verified: Whether the accessor produced a definitive answer
        verify_status: Upstream status observed during verification
        etag: Entity tag of the confirmed resource, when available
        details: Extra context (poll status, timeout reason, ...)
    """

    ok: bool
    verified: bool
    verify_status: Optional[int] = None
    etag: Optional[str] = None
    details: Optional[Mapping[str, Any]] = None

    def __post_init__(self) -> None:
        if self.details is not None:
            object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"ok": self.ok, "verified": self.verified}
        if self.verify_status is not None:
            result["verify_status"] = self.verify_status
        if self.etag is not None:
            result["etag"] = self.etag
        if self.details is not None:
            result["details"] = dict(self.details)
        return result
