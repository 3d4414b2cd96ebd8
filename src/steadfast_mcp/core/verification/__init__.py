"""Post-mutation verification and asynchronous job polling."""

from steadfast_mcp.core.verification.models import (
    Accessor,
    PollConfig,
    PollState,
    SleepFunc,
    VerifyResult,
)
from steadfast_mcp.core.verification.verifier import (
    NOT_FOUND_STATUSES,
    extract_etag,
    extract_last_result,
    extract_status_text,
    poll_until_terminal,
    verify_batch,
    verify_deleted,
    verify_exists,
)

__all__ = [
    "Accessor",
    "PollConfig",
    "PollState",
    "SleepFunc",
    "VerifyResult",
    "NOT_FOUND_STATUSES",
    "extract_etag",
    "extract_last_result",
    "extract_status_text",
    "poll_until_terminal",
    "verify_batch",
    "verify_deleted",
    "verify_exists",
]
