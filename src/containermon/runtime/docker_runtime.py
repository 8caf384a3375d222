"""
Container runtime backed by the Docker Engine API.

Uses the low-level `docker.APIClient` so listings and stats come back as
the raw Engine API payloads.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

import docker
from docker.errors import DockerException
import requests

from ..models.entities import CpuCounters, EntityDescription, MemoryCounters, RawStats
from ..validation import DataUnavailable
from .base import AbstractContainerRuntime

logger = logging.getLogger(__name__)


class DockerRuntime(AbstractContainerRuntime):
    """
    Lists running containers and fetches one-shot stats for each.

    Args:
        base_url: Docker daemon URL; None uses the environment
            (DOCKER_HOST etc.) like the docker CLI does.
        api: Pre-built low-level API client, mainly for tests.
    """

    name = "docker"

    def __init__(self, base_url: Optional[str] = None, api: Any = None, **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url
        self._api = api
        self._client: Optional[docker.DockerClient] = None
        self._client_lock = threading.Lock()

    def _get_api(self) -> Any:
        """Connect on first use so a missing daemon surfaces per cycle, not at import."""
        with self._client_lock:
            if self._api is None:
                try:
                    if self.base_url:
                        self._client = docker.DockerClient(base_url=self.base_url)
                    else:
                        self._client = docker.from_env()
                except DockerException as e:
                    raise DataUnavailable(f"cannot connect to Docker daemon: {e}") from e
                self._api = self._client.api
                logger.info(f"Connected to Docker daemon at {self._api.base_url}")
            return self._api

    def list_live_entities(self) -> List[EntityDescription]:
        api = self._get_api()
        try:
            containers = api.containers(filters={"status": ["running"]})
        except (DockerException, requests.RequestException) as e:
            raise DataUnavailable(f"listing running containers failed: {e}") from e

        return [
            EntityDescription(id=c["Id"], display_name_candidates=list(c.get("Names") or []))
            for c in containers
        ]

    def fetch_stats(self, entity_id: str) -> RawStats:
        api = self._get_api()
        try:
            stats = api.stats(entity_id, stream=False)
        except (DockerException, requests.RequestException) as e:
            raise DataUnavailable(
                f"fetching stats for {entity_id[:12]} failed: {e}", entity_id=entity_id
            ) from e

        raw = parse_stats(stats)
        if raw.cpu is None and raw.memory is None:
            raise DataUnavailable(f"no usable stats for {entity_id[:12]}", entity_id=entity_id)
        return raw

    def close(self) -> None:
        with self._client_lock:
            if self._client is not None:
                self._client.close()
                self._client = None
                self._api = None


def parse_stats(stats: Dict[str, Any]) -> RawStats:
    """
    Map an Engine API stats payload onto RawStats.

    Missing sections map to None rather than raising; a stopped container
    reports empty `cpu_stats` / `memory_stats` objects.
    """
    return RawStats(cpu=_parse_cpu(stats.get("cpu_stats") or {}),
                    memory=_parse_memory(stats.get("memory_stats") or {}))


def _parse_cpu(cpu_stats: Dict[str, Any]) -> Optional[CpuCounters]:
    cpu_usage = cpu_stats.get("cpu_usage") or {}
    total_usage = cpu_usage.get("total_usage")
    system_usage = cpu_stats.get("system_cpu_usage")
    if total_usage is None or system_usage is None:
        return None
    percpu = cpu_usage.get("percpu_usage")
    return CpuCounters(
        busy_time=float(total_usage),
        total_time=float(system_usage),
        per_processor_usage=list(percpu) if percpu else None,
        online_cpus=cpu_stats.get("online_cpus"),
    )


def _parse_memory(memory_stats: Dict[str, Any]) -> Optional[MemoryCounters]:
    usage = memory_stats.get("usage")
    if usage is None:
        return None
    return MemoryCounters(usage=float(usage), limit=memory_stats.get("limit"))
