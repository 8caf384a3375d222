"""
Time-windowed smoothing of instantaneous samples.

A single CPU sample is dominated by scheduling noise; the trailing mean over
the last minute is stable enough to compare against a threshold. Memory use
of a window is bounded by window duration / sample interval because every
insert prunes expired samples.
"""

import logging
from collections import deque
from typing import TYPE_CHECKING, Deque, Tuple

from ..models.entities import MetricKind
from ..validation import InsufficientData

if TYPE_CHECKING:
    from ..monitoring.state_store import StateStore

logger = logging.getLogger(__name__)

ROLLING_WINDOW_SECONDS = 60.0


class RollingWindow:
    """
    A deque of (timestamp, value) samples covering a fixed duration.

    Samples must be added in non-decreasing timestamp order.
    """

    def __init__(self, duration: float = ROLLING_WINDOW_SECONDS):
        self.duration = duration
        self._samples: Deque[Tuple[float, float]] = deque()

    def add(self, timestamp: float, value: float) -> None:
        """Insert a sample, then drop every sample older than the window."""
        self._samples.append((timestamp, value))
        cutoff = timestamp - self.duration
        while self._samples and self._samples[0][0] < cutoff:
            self._samples.popleft()

    def mean(self) -> float:
        """
        Arithmetic mean of the retained samples.

        Raises:
            InsufficientData: If the window is empty.
        """
        if not self._samples:
            raise InsufficientData("rolling window holds no samples")
        return sum(value for _, value in self._samples) / len(self._samples)

    def timestamps(self) -> Tuple[float, ...]:
        return tuple(ts for ts, _ in self._samples)

    def __len__(self) -> int:
        return len(self._samples)


class RollingWindowAverager:
    """
    Records and averages samples per entity and metric kind.

    The windows themselves live in the orchestrator's state store; this
    class is the record/average interface over them.
    """

    def __init__(self, store: "StateStore"):
        self.store = store

    def record(self, entity_id: str, metric: MetricKind, timestamp: float, value: float) -> None:
        """Add a sample to the entity's window for this metric."""
        series = self.store.series(entity_id, metric)
        series.window.add(timestamp, value)
        logger.debug(
            f"Recorded {metric.value} sample {value:.2f} for {entity_id} "
            f"({len(series.window)} in window)"
        )

    def average(self, entity_id: str, metric: MetricKind) -> float:
        """
        Smoothed value for the entity and metric.

        Raises:
            InsufficientData: If nothing has been recorded yet.
        """
        return self.store.series(entity_id, metric).window.mean()

    def has_samples(self, entity_id: str, metric: MetricKind) -> bool:
        return len(self.store.series(entity_id, metric).window) > 0
