"""
Metric computation: percent calculators and rolling-window smoothing.
"""

from .percent import cpu_percent, memory_percent, processor_count
from .rolling_window import ROLLING_WINDOW_SECONDS, RollingWindow, RollingWindowAverager

__all__ = [
    "cpu_percent",
    "memory_percent",
    "processor_count",
    "ROLLING_WINDOW_SECONDS",
    "RollingWindow",
    "RollingWindowAverager",
]
