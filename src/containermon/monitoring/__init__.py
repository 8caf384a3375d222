"""
Monitoring coordination: the sampling orchestrator and the per-entity
state store it owns.
"""

from .orchestrator import SamplingOrchestrator
from .state_store import MetricSeries, StateStore, derive_display_name

__all__ = [
    "SamplingOrchestrator",
    "MetricSeries",
    "StateStore",
    "derive_display_name",
]
