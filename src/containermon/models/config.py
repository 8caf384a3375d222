"""
Configuration data models.

This module contains the configuration structures for the sampling loops,
alert thresholds, and notification channels.
"""

import re
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional


@dataclass
class MonitorConfig:
    """
    Configuration for the monitor's global behavior, loaded from `config.toml`.
    """

    # [monitor]
    interval_seconds: float = 10.0
    sample_interval_seconds: float = 2.0
    fetch_timeout_seconds: float = 15.0
    max_concurrent_fetches: int = 8
    runtime: str = "docker"  # "docker" or "process"
    docker_base_url: Optional[str] = None
    process_pattern: Optional[str] = None  # process runtime only
    verbose: bool = False
    exclude_pattern: Optional[str] = None

    # [monitor.thresholds]
    cpu_threshold: float = 90.0
    memory_threshold: float = 90.0

    def compiled_exclude_pattern(self) -> Optional[re.Pattern]:
        """Return the compiled exclusion regex, or None if unset."""
        if not self.exclude_pattern:
            return None
        return re.compile(self.exclude_pattern)


@dataclass
class ChannelConfig:
    """
    Configuration for one notification channel, from a `[[channels]]` table.
    """

    # Channel implementation: "console" or "slack".
    type: str
    # Minimum spacing in seconds between two forwarded events with the same tags.
    throttle_seconds: float = 0.0
    # Only events whose tags intersect this set are forwarded; None forwards all.
    tags: Optional[FrozenSet[str]] = None
    # Slack incoming-webhook URL (slack only).
    webhook_url: Optional[str] = None
    emoji: str = ":computer:"
    username: str = "containermon"
    # HTTP timeout for webhook delivery.
    timeout_seconds: float = 10.0


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    monitor: MonitorConfig
    channels: List[ChannelConfig] = field(default_factory=list)
