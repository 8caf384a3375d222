"""
Alert event models handed from the state machines to delivery channels.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import FrozenSet

from .entities import MetricKind


class Severity(str, Enum):
    """Alert severities, also used as routing tags."""

    WARNING = "warning"
    RESTORED = "restored"
    INFO = "info"


@dataclass(frozen=True)
class AlertEvent:
    """
    An immutable alert produced by a threshold state machine.

    `tags` always carries the severity and metric kind values; channels use
    it for filtering and the throttle uses it as the rate-limit key.
    """

    entity_id: str
    display_name: str
    metric_kind: MetricKind
    severity: Severity
    value: float
    tags: FrozenSet[str]
    threshold: float = 0.0
    breach_count: int = 0
    breach_seconds: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def throttle_key(self) -> FrozenSet[str]:
        return self.tags


def event_tags(metric_kind: MetricKind, severity: Severity) -> FrozenSet[str]:
    """Build the routing tag set for a metric kind and severity."""
    return frozenset({metric_kind.value, severity.value})
