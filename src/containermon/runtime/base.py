"""
Defines the interface between the monitor and a container runtime.

This module provides:
- AbstractContainerRuntime: the listing and stats-fetch contract every
  runtime adapter implements (e.g. Docker Engine, local processes).
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from ..models.entities import EntityDescription, RawStats

logger = logging.getLogger(__name__)


class AbstractContainerRuntime(ABC):
    """
    Abstract base class for container runtimes.

    Implementations are called from worker threads, one call per entity per
    sampling cycle, so `fetch_stats` may block on I/O and must be safe to
    run concurrently for different entities.
    """

    name: str = "runtime"

    def __init__(self, **kwargs):
        self.runtime_kwargs = kwargs
        logger.info(f"Initializing {self.__class__.__name__} with extra_args: {kwargs}")

    @abstractmethod
    def list_live_entities(self) -> List[EntityDescription]:
        """
        List the workloads that are currently running.

        Returns:
            One EntityDescription per running workload.
        """
        pass

    @abstractmethod
    def fetch_stats(self, entity_id: str) -> RawStats:
        """
        Fetch one stats sample for a workload.

        Raises:
            DataUnavailable: If no usable stats could be obtained.
        """
        pass

    def close(self) -> None:
        """Release any connections held by the runtime."""
        pass
