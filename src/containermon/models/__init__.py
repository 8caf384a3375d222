"""
Data models for the monitoring pipeline.

Configuration Models:
- Sampling loop, threshold and runtime settings
- Notification channel settings

Entity Models:
- Runtime listings and observed workloads
- Raw CPU and memory counters

Alert Models:
- Severities and immutable alert events
"""

from .alerts import AlertEvent, Severity, event_tags
from .config import AppConfig, ChannelConfig, MonitorConfig
from .entities import (
    CpuCounters,
    EntityDescription,
    MemoryCounters,
    MetricKind,
    MonitoredEntity,
    RawStats,
)

__all__ = [
    # Configuration
    "AppConfig",
    "ChannelConfig",
    "MonitorConfig",
    # Entities
    "CpuCounters",
    "EntityDescription",
    "MemoryCounters",
    "MetricKind",
    "MonitoredEntity",
    "RawStats",
    # Alerts
    "AlertEvent",
    "Severity",
    "event_tags",
]
