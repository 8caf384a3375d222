"""
Data models for monitored workloads and the raw stats they report.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class MetricKind(str, Enum):
    """The metrics tracked per entity."""

    CPU = "cpu"
    MEMORY = "memory"


@dataclass(frozen=True)
class EntityDescription:
    """
    One running workload as reported by a runtime listing.

    Attributes:
        id: Opaque identifier, stable across samples.
        display_name_candidates: Names offered by the runtime, best first.
    """

    id: str
    display_name_candidates: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class MonitoredEntity:
    """
    A workload the monitor has observed at least once.

    The exclusion flag is computed a single time, when the entity is first
    seen, from the configured exclusion pattern.
    """

    id: str
    display_name: str
    excluded: bool = False


@dataclass(frozen=True)
class CpuCounters:
    """
    Cumulative CPU counters for one entity at one point in time.

    Attributes:
        busy_time: Cumulative CPU time consumed by the entity.
        total_time: Cumulative CPU time of the whole system, same unit.
        per_processor_usage: Per-processor usage counters, if reported.
        online_cpus: Processor count reported separately by the runtime.
    """

    busy_time: float
    total_time: float
    per_processor_usage: Optional[List[float]] = None
    online_cpus: Optional[int] = None


@dataclass(frozen=True)
class MemoryCounters:
    """Point-in-time memory usage and the limit it is measured against."""

    usage: float
    limit: Optional[float] = None


@dataclass(frozen=True)
class RawStats:
    """
    One stats fetch for one entity.

    Either half may be None when the runtime returned partial data.
    """

    cpu: Optional[CpuCounters] = None
    memory: Optional[MemoryCounters] = None
