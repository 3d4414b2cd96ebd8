"""
Observability utilities for steadfast-mcp.

Provides metrics collection, audit logging and redaction for the
reliability engines and the tool executor.
"""

from steadfast_mcp.core.observability.audit import (
    AuditEvent,
    AuditEventType,
    AuditLogger,
    audit_log,
    get_audit_logger,
)
from steadfast_mcp.core.observability.metrics import (
    Metric,
    MetricKind,
    MetricsCollector,
    get_metrics,
)
from steadfast_mcp.core.observability.redaction import (
    SENSITIVE_PATTERNS,
    redact_for_logging,
    redact_sensitive_data,
)

__all__ = [
    # Metrics
    "Metric",
    "MetricKind",
    "MetricsCollector",
    "get_metrics",
    # Audit
    "AuditEvent",
    "AuditEventType",
    "AuditLogger",
    "audit_log",
    "get_audit_logger",
    # Redaction
    "SENSITIVE_PATTERNS",
    "redact_for_logging",
    "redact_sensitive_data",
]
