"""
Per-entity metric state owned by the sampling orchestrator.

The store replaces a module-level dict of container state with an explicit
object keyed by entity id. Entities are never removed: a workload that
drops out of a listing keeps its series in case it comes back.
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..metrics.rolling_window import ROLLING_WINDOW_SECONDS, RollingWindow
from ..models.entities import CpuCounters, EntityDescription, MetricKind, MonitoredEntity

logger = logging.getLogger(__name__)


def derive_display_name(candidates: List[str]) -> str:
    """
    Pick a human label from the names a runtime reports.

    Docker prefixes container names with "/", which is dropped here.
    """
    for candidate in candidates:
        name = (candidate or "").strip().lstrip("/")
        if name:
            return name
    return "unknown"


@dataclass
class MetricSeries:
    """
    Mutable state for one (entity, metric kind) pair.

    Attributes:
        previous_cpu: Last cumulative counters, for delta-based CPU percent.
        window: Rolling window of smoothed-metric samples.
        breach_count: Consecutive evaluations at or above threshold.
        latest: Most recent instantaneous value.
        updated_at: Monotonic time of the most recent successful sample.
        evaluated_at: `updated_at` as of the last evaluation of this series.
    """

    previous_cpu: Optional[CpuCounters] = None
    window: RollingWindow = field(default_factory=lambda: RollingWindow(ROLLING_WINDOW_SECONDS))
    breach_count: int = 0
    latest: Optional[float] = None
    updated_at: Optional[float] = None
    evaluated_at: Optional[float] = None

    def update(self, value: float, timestamp: float) -> None:
        self.latest = value
        self.updated_at = timestamp


class StateStore:
    """
    Entities and their metric series, keyed by entity id.

    Each entity also gets an asyncio.Lock so that a fetch-and-commit and an
    evaluation of the same entity never interleave.
    """

    def __init__(self, exclude_pattern: Optional[re.Pattern] = None):
        self.exclude_pattern = exclude_pattern
        self._entities: Dict[str, MonitoredEntity] = {}
        self._series: Dict[Tuple[str, MetricKind], MetricSeries] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def observe(self, description: EntityDescription) -> MonitoredEntity:
        """
        Return the entity for a listing entry, creating it on first sight.

        The display name and exclusion flag are fixed at creation.
        """
        entity = self._entities.get(description.id)
        if entity is not None:
            return entity

        display_name = derive_display_name(description.display_name_candidates)
        excluded = bool(self.exclude_pattern and self.exclude_pattern.search(display_name))
        entity = MonitoredEntity(id=description.id, display_name=display_name, excluded=excluded)
        self._entities[description.id] = entity

        if excluded:
            logger.info(f"Discovered container {display_name} ({description.id[:12]}), excluded by pattern")
        else:
            logger.info(f"Discovered container {display_name} ({description.id[:12]})")
        return entity

    def entity(self, entity_id: str) -> Optional[MonitoredEntity]:
        return self._entities.get(entity_id)

    def entities(self) -> List[MonitoredEntity]:
        return list(self._entities.values())

    def series(self, entity_id: str, metric: MetricKind) -> MetricSeries:
        """Get or create the series for an entity and metric."""
        key = (entity_id, metric)
        series = self._series.get(key)
        if series is None:
            series = MetricSeries()
            self._series[key] = series
        return series

    def lock_for(self, entity_id: str) -> asyncio.Lock:
        lock = self._locks.get(entity_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[entity_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, entity_id: str) -> bool:
        return entity_id in self._entities
