"""
containermon: threshold alerting for container CPU and memory usage.

This package watches a dynamic set of running containers and raises
rate-limited alerts when a metric stays over its threshold, and again when
it recovers.

The package is organized into specialized modules:
- config: Configuration loading, layering and validation
- models: Data structures and type definitions
- validation: Validation helpers and the error taxonomy
- metrics: Percent calculators and rolling-window smoothing
- alerting: Threshold state machines, notification throttle and channels
- runtime: Container runtime adapters (Docker, local processes)
- monitoring: The sampling orchestrator and its state store
- cli: Command-line interface

Usage:
    From command line:
        containermon --cpu-threshold 80 --slack-hook https://hooks.slack.com/...

    Programmatically:
        from containermon import SamplingOrchestrator, NotificationThrottle, load_config
        config = load_config()
        ...
"""

from .alerting import (
    ConsoleChannel,
    DeliveryChannel,
    NotificationThrottle,
    SlackChannel,
    ThresholdStateMachine,
)
from .cli import main_cli
from .config import get_config, load_config, set_config_path
from .metrics import RollingWindowAverager, cpu_percent, memory_percent
from .models import (
    AlertEvent,
    AppConfig,
    ChannelConfig,
    MetricKind,
    MonitorConfig,
    MonitoredEntity,
    Severity,
)
from .monitoring import SamplingOrchestrator, StateStore
from .runtime import AbstractContainerRuntime, create_runtime
from .validation import DataUnavailable, DeliveryFailure, InsufficientData, ValidationError

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "main_cli",
    "get_config",
    "load_config",
    "set_config_path",
    "SamplingOrchestrator",
    "StateStore",
    # Pipeline components
    "cpu_percent",
    "memory_percent",
    "RollingWindowAverager",
    "ThresholdStateMachine",
    "NotificationThrottle",
    "DeliveryChannel",
    "ConsoleChannel",
    "SlackChannel",
    "AbstractContainerRuntime",
    "create_runtime",
    # Models
    "AlertEvent",
    "AppConfig",
    "ChannelConfig",
    "MetricKind",
    "MonitorConfig",
    "MonitoredEntity",
    "Severity",
    # Errors
    "DataUnavailable",
    "DeliveryFailure",
    "InsufficientData",
    "ValidationError",
]
