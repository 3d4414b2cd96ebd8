"""Metrics as structured log records.

No exporter is bundled: each metric is one ``METRIC: <prefix>.<name>`` record
on the ``...metrics`` logger carrying the metric as ``extra={"metric": ...}``,
which log pipelines can aggregate directly.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

logger = logging.getLogger(__name__)


class MetricKind(str, Enum):
    COUNTER = "counter"
    TIMER = "timer"


@dataclass(frozen=True)
class Metric:
    """A single observation.

    Attributes:
        name: Dotted metric name without the collector prefix
        value: Count, or duration in milliseconds for timers
        kind: Counter or timer
        labels: Low-cardinality dimensions (tool, mode, outcome, ...)
    """

    name: str
    value: Union[int, float]
    kind: MetricKind
    labels: Mapping[str, str] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "type": self.kind.value,
            "labels": dict(self.labels),
            "timestamp": self.timestamp,
        }


class MetricsCollector:
    """Emits counters and timers under a common prefix."""

    def __init__(self, prefix: str = "steadfast_mcp", name: str = f"{__name__}.metrics"):
        self.prefix = prefix
        self._logger = logging.getLogger(name)

    def emit(self, metric: Metric) -> None:
        if self._logger.isEnabledFor(logging.INFO):
            self._logger.info("METRIC: %s.%s", self.prefix, metric.name, extra={"metric": metric.to_dict()})

    def counter(self, name: str, value: int = 1, labels: Optional[Mapping[str, str]] = None) -> None:
        self.emit(Metric(name, value, MetricKind.COUNTER, labels or {}))

    def timer(self, name: str, duration_ms: float, labels: Optional[Mapping[str, str]] = None) -> None:
        """Record a duration in milliseconds."""
        self.emit(Metric(name, duration_ms, MetricKind.TIMER, labels or {}))


_metrics = MetricsCollector()


def get_metrics() -> MetricsCollector:
    """Get the process-wide metrics collector."""
    return _metrics
