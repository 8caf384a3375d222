"""
Runtime that treats local processes as monitored workloads, using psutil.

Handy on hosts without Docker: each running process matching an optional
pattern becomes an entity whose id is its PID.
"""

import logging
import re
from typing import List, Optional

import psutil

from ..models.entities import CpuCounters, EntityDescription, MemoryCounters, RawStats
from ..validation import DataUnavailable
from .base import AbstractContainerRuntime

logger = logging.getLogger(__name__)

_SKIPPED_STATUSES = {psutil.STATUS_ZOMBIE, psutil.STATUS_STOPPED, psutil.STATUS_DEAD}


class ProcessRuntime(AbstractContainerRuntime):
    """
    Lists running processes and reports their CPU and memory counters.

    CPU busy time is the process user + system time; total time is the
    system-wide CPU time summed over all processors, so the generic
    percent formula yields the familiar per-core percentage. Memory is RSS
    against total physical memory.

    Args:
        process_pattern: Optional regex; only processes whose name or
            command line matches are listed.
    """

    name = "process"

    def __init__(self, process_pattern: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        try:
            self.compiled_pattern: Optional[re.Pattern] = (
                re.compile(process_pattern) if process_pattern else None
            )
        except re.error as e:
            logger.error(f"Invalid regex pattern for ProcessRuntime: '{process_pattern}'. Error: {e}")
            raise ValueError(f"Invalid regular expression pattern: {process_pattern}") from e
        self._iter_attrs = ["pid", "name", "cmdline", "status"]

    def list_live_entities(self) -> List[EntityDescription]:
        entities = []
        for proc in psutil.process_iter(self._iter_attrs):
            try:
                info = proc.info
                if info.get("status") in _SKIPPED_STATUSES:
                    continue
                proc_name = info.get("name") or ""
                cmdline_str = " ".join(info.get("cmdline") or [])
                if self.compiled_pattern and not (
                    self.compiled_pattern.search(proc_name)
                    or (cmdline_str and self.compiled_pattern.search(cmdline_str))
                ):
                    continue
                entities.append(
                    EntityDescription(
                        id=str(info["pid"]),
                        display_name_candidates=[f"{proc_name}[{info['pid']}]", cmdline_str],
                    )
                )
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                # Processes vanish or hide between iteration and inspection.
                continue
        return entities

    def fetch_stats(self, entity_id: str) -> RawStats:
        try:
            proc = psutil.Process(int(entity_id))
            with proc.oneshot():
                times = proc.cpu_times()
                rss = proc.memory_info().rss
        except (psutil.NoSuchProcess, psutil.AccessDenied, ValueError) as e:
            raise DataUnavailable(f"process {entity_id} unavailable: {e}", entity_id=entity_id) from e

        per_cpu = [sum(cpu) for cpu in psutil.cpu_times(percpu=True)]
        return RawStats(
            cpu=CpuCounters(
                busy_time=times.user + times.system,
                total_time=sum(per_cpu),
                per_processor_usage=per_cpu,
            ),
            memory=MemoryCounters(usage=float(rss), limit=float(psutil.virtual_memory().total)),
        )
