"""
Container runtime adapters: workload discovery and stats fetching.
"""

from .base import AbstractContainerRuntime
from .factory import create_runtime

__all__ = [
    "AbstractContainerRuntime",
    "create_runtime",
]
