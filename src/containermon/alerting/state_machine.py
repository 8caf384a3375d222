"""
Threshold hysteresis per entity and metric.

A series is NORMAL while its breach count is zero and BREACHING otherwise.
Warnings repeat on every breaching evaluation; the notification throttle is
what keeps them from flooding a channel. Because no "already warned" flag is
kept, the machine can be re-derived from scratch after a restart.
"""

import logging
from typing import TYPE_CHECKING, Optional

from ..models.alerts import AlertEvent, Severity, event_tags
from ..models.entities import MetricKind, MonitoredEntity

if TYPE_CHECKING:
    from ..monitoring.state_store import MetricSeries

logger = logging.getLogger(__name__)

GRACE_PERIOD_SECONDS = 60.0


class ThresholdStateMachine:
    """
    Decides WARN / RESTORED / silent transitions for one metric kind.

    Args:
        metric_kind: The metric this machine evaluates.
        threshold: Values at or above this are breaches.
        interval_seconds: Evaluation cadence, used to report breach duration.
        verbose: Emit an `info` event on cycles that would otherwise be silent.
    """

    def __init__(
        self,
        metric_kind: MetricKind,
        threshold: float,
        interval_seconds: float,
        verbose: bool = False,
    ):
        self.metric_kind = metric_kind
        self.threshold = threshold
        self.interval_seconds = interval_seconds
        self.verbose = verbose

    def evaluate(
        self,
        entity: MonitoredEntity,
        series: "MetricSeries",
        value: float,
        in_grace_period: bool = False,
    ) -> Optional[AlertEvent]:
        """
        Apply one evaluation cycle to a series.

        During the grace period the breach count is left untouched and only
        verbose `info` events are produced.

        Returns:
            The event to publish, or None for a silent cycle.
        """
        if in_grace_period:
            return self._info(entity, series, value) if self.verbose else None

        if value >= self.threshold:
            series.breach_count += 1
            logger.debug(
                f"{entity.display_name} {self.metric_kind.value} at {value:.1f}% "
                f"breaching (count={series.breach_count})"
            )
            return self._event(entity, series, value, Severity.WARNING)

        if series.breach_count > 0:
            event = self._event(entity, series, value, Severity.RESTORED)
            series.breach_count = 0
            return event

        return self._info(entity, series, value) if self.verbose else None

    def _info(self, entity: MonitoredEntity, series: "MetricSeries", value: float) -> AlertEvent:
        return self._event(entity, series, value, Severity.INFO)

    def _event(
        self,
        entity: MonitoredEntity,
        series: "MetricSeries",
        value: float,
        severity: Severity,
    ) -> AlertEvent:
        return AlertEvent(
            entity_id=entity.id,
            display_name=entity.display_name,
            metric_kind=self.metric_kind,
            severity=severity,
            value=value,
            tags=event_tags(self.metric_kind, severity),
            threshold=self.threshold,
            breach_count=series.breach_count,
            breach_seconds=series.breach_count * self.interval_seconds,
        )
