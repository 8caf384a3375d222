"""
Percentage calculators for raw runtime counters.

Both functions are pure: the caller keeps the previous CPU counters between
samples and passes them back in on the next call.
"""

import logging
from typing import Optional

from ..models.entities import CpuCounters, MemoryCounters
from ..validation import DataUnavailable

logger = logging.getLogger(__name__)


def processor_count(counters: CpuCounters) -> Optional[int]:
    """
    Number of logical processors behind a CPU sample.

    Per-processor usage counters win; the runtime's separately reported
    online CPU count is the fallback (cgroup v2 hosts omit the per-CPU list).
    """
    if counters.per_processor_usage:
        return len(counters.per_processor_usage)
    if counters.online_cpus:
        return int(counters.online_cpus)
    return None


def cpu_percent(current: CpuCounters, previous: CpuCounters) -> float:
    """
    CPU utilization between two cumulative samples.

    Computes ``(busy_delta / total_delta) * processors * 100``. A fully busy
    two-processor entity therefore reads 200.

    Args:
        current: Counters from the latest fetch.
        previous: Counters from the fetch before it.

    Returns:
        The percentage, or 0.0 when either delta is not positive (idle
        entity, counters not yet populated, or counters reset by a restart).

    Raises:
        DataUnavailable: If no processor count can be determined.
    """
    processors = processor_count(current)
    if not processors:
        raise DataUnavailable("per-processor CPU data unavailable")

    busy_delta = current.busy_time - previous.busy_time
    total_delta = current.total_time - previous.total_time
    if total_delta <= 0 or busy_delta <= 0:
        return 0.0

    return (busy_delta / total_delta) * processors * 100.0


def memory_percent(memory: MemoryCounters) -> float:
    """
    Memory usage as a percentage of the limit, clamped to [0, 100].

    Returns 0.0 when the limit is zero or unknown.
    """
    if not memory.limit or memory.limit <= 0:
        return 0.0
    percent = (memory.usage / memory.limit) * 100.0
    return max(0.0, min(100.0, percent))
