"""
Runtime factory.

Builds the container runtime named in the monitor configuration.
"""

import logging

from ..models.config import MonitorConfig
from .base import AbstractContainerRuntime

logger = logging.getLogger(__name__)


def create_runtime(config: MonitorConfig) -> AbstractContainerRuntime:
    """
    Create the runtime adapter selected by `config.runtime`.

    Raises:
        ValueError: If the runtime name is unknown.
    """
    logger.info(f"Creating '{config.runtime}' runtime")

    if config.runtime == "docker":
        from .docker_runtime import DockerRuntime

        return DockerRuntime(base_url=config.docker_base_url)
    elif config.runtime == "process":
        from .process_runtime import ProcessRuntime

        return ProcessRuntime(process_pattern=config.process_pattern)
    else:
        raise ValueError(f"Unknown runtime: {config.runtime}")
