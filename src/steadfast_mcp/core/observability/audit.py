"""Audit trail for reliability decisions.

Every decision that changes what a caller sees (a classified failure, a
verification outcome, a governed response, an elicitation answer) is
recorded on a dedicated ``...audit`` logger so deployments can route the
trail separately from diagnostics.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from steadfast_mcp.core.context import get_client_id, get_correlation_id

logger = logging.getLogger(__name__)


class AuditEventType(str, Enum):
    """Decisions worth an audit record."""

    TOOL_INVOCATION = "tool_invocation"
    VERIFICATION = "verification"
    POLL_COMPLETED = "poll_completed"
    RESPONSE_GOVERNED = "response_governed"
    ELICITATION = "elicitation"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class AuditEvent:
    """One audit record.

    Use ``AuditEvent.capture`` inside a tool invocation so the correlation
    and client IDs of the current request are attached.
    """

    event_type: AuditEventType
    details: Mapping[str, Any] = field(default_factory=dict)
    correlation_id: Optional[str] = None
    client_id: Optional[str] = None
    timestamp: str = field(default_factory=_utc_now)

    @classmethod
    def capture(cls, event_type: AuditEventType, **details: Any) -> "AuditEvent":
        client = get_client_id()
        return cls(
            event_type=event_type,
            details=details,
            correlation_id=get_correlation_id() or None,
            client_id=client if client and client != "anonymous" else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "event_type": self.event_type.value,
            "timestamp": self.timestamp,
            "details": dict(self.details),
        }
        if self.correlation_id:
            record["correlation_id"] = self.correlation_id
        if self.client_id:
            record["client_id"] = self.client_id
        return record


class AuditLogger:
    """Writes audit events as ``AUDIT: <type>`` records with the event in ``extra``."""

    def __init__(self, name: str = f"{__name__}.audit"):
        self._logger = logging.getLogger(name)

    def log(self, event: AuditEvent) -> None:
        if self._logger.isEnabledFor(logging.INFO):
            self._logger.info("AUDIT: %s", event.event_type.value, extra={"audit": event.to_dict()})

    def record(self, event_type: Union[AuditEventType, str], **details: Any) -> None:
        """Capture and log an event.

        Raises:
            ValueError: ``event_type`` is not an ``AuditEventType`` value
        """
        self.log(AuditEvent.capture(AuditEventType(event_type), **details))

    def tool_invocation(
        self,
        tool_name: str,
        *,
        success: bool,
        duration_ms: Optional[float] = None,
        **details: Any,
    ) -> None:
        self.record(
            AuditEventType.TOOL_INVOCATION,
            tool=tool_name,
            success=success,
            duration_ms=duration_ms,
            **details,
        )


_audit = AuditLogger()


def get_audit_logger() -> AuditLogger:
    """Get the process-wide audit logger."""
    return _audit


def audit_log(event_type: Union[AuditEventType, str], **details: Any) -> None:
    """Shorthand for ``get_audit_logger().record(event_type, **details)``."""
    _audit.record(event_type, **details)
