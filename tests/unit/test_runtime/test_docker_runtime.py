"""
Unit tests for the Docker Engine runtime adapter.

The low-level API client is replaced with a Mock returning canned Engine
API payloads.
"""

from unittest.mock import Mock, patch

import pytest
import requests
from docker.errors import DockerException

from containermon.models import MonitorConfig
from containermon.runtime import create_runtime
from containermon.runtime.docker_runtime import DockerRuntime, parse_stats
from containermon.runtime.process_runtime import ProcessRuntime
from containermon.validation import DataUnavailable


def engine_stats(total=2000, system=50000, percpu=(1000, 1000), online=2, usage=256, limit=1024):
    return {
        "cpu_stats": {
            "cpu_usage": {"total_usage": total, "percpu_usage": list(percpu) if percpu else None},
            "system_cpu_usage": system,
            "online_cpus": online,
        },
        "memory_stats": {"usage": usage, "limit": limit},
    }


@pytest.mark.unit
class TestParseStats:
    """Test cases for mapping Engine API payloads onto RawStats."""

    def test_full_payload(self):
        raw = parse_stats(engine_stats())

        assert raw.cpu.busy_time == 2000.0
        assert raw.cpu.total_time == 50000.0
        assert raw.cpu.per_processor_usage == [1000, 1000]
        assert raw.cpu.online_cpus == 2
        assert raw.memory.usage == 256.0
        assert raw.memory.limit == 1024

    def test_cgroup_v2_payload_without_percpu(self):
        raw = parse_stats(engine_stats(percpu=None, online=4))

        assert raw.cpu.per_processor_usage is None
        assert raw.cpu.online_cpus == 4

    def test_stopped_container_payload(self):
        raw = parse_stats({"cpu_stats": {}, "memory_stats": {}})

        assert raw.cpu is None
        assert raw.memory is None

    def test_missing_system_usage(self):
        payload = engine_stats()
        del payload["cpu_stats"]["system_cpu_usage"]

        assert parse_stats(payload).cpu is None


@pytest.mark.unit
class TestDockerRuntime:
    """Test cases for DockerRuntime against a mocked API client."""

    def test_list_live_entities(self):
        api = Mock()
        api.containers.return_value = [
            {"Id": "aaa111", "Names": ["/web"]},
            {"Id": "bbb222", "Names": None},
        ]
        runtime = DockerRuntime(api=api)

        entities = runtime.list_live_entities()

        api.containers.assert_called_once_with(filters={"status": ["running"]})
        assert [e.id for e in entities] == ["aaa111", "bbb222"]
        assert entities[0].display_name_candidates == ["/web"]
        assert entities[1].display_name_candidates == []

    def test_list_failure_raises_data_unavailable(self):
        api = Mock()
        api.containers.side_effect = requests.ConnectionError("daemon gone")

        with pytest.raises(DataUnavailable):
            DockerRuntime(api=api).list_live_entities()

    def test_fetch_stats(self):
        api = Mock()
        api.stats.return_value = engine_stats()

        raw = DockerRuntime(api=api).fetch_stats("aaa111")

        api.stats.assert_called_once_with("aaa111", stream=False)
        assert raw.memory.usage == 256.0

    def test_fetch_failure_raises_data_unavailable(self):
        api = Mock()
        api.stats.side_effect = DockerException("no such container")

        with pytest.raises(DataUnavailable) as exc_info:
            DockerRuntime(api=api).fetch_stats("aaa111")

        assert exc_info.value.entity_id == "aaa111"

    def test_empty_stats_raise_data_unavailable(self):
        api = Mock()
        api.stats.return_value = {"cpu_stats": {}, "memory_stats": {}}

        with pytest.raises(DataUnavailable):
            DockerRuntime(api=api).fetch_stats("aaa111")

    def test_lazy_connection_failure(self):
        with patch("containermon.runtime.docker_runtime.docker.from_env",
                   side_effect=DockerException("socket missing")):
            runtime = DockerRuntime()
            with pytest.raises(DataUnavailable):
                runtime.list_live_entities()

    def test_connects_with_base_url(self):
        with patch("containermon.runtime.docker_runtime.docker.DockerClient") as client_cls:
            client_cls.return_value.api.containers.return_value = []
            runtime = DockerRuntime(base_url="tcp://127.0.0.1:2375")

            assert runtime.list_live_entities() == []
            client_cls.assert_called_once_with(base_url="tcp://127.0.0.1:2375")

            runtime.close()
            client_cls.return_value.close.assert_called_once()


@pytest.mark.unit
class TestRuntimeFactory:
    """Test cases for create_runtime."""

    def test_docker(self):
        runtime = create_runtime(MonitorConfig(runtime="docker", docker_base_url="unix://x.sock"))

        assert isinstance(runtime, DockerRuntime)
        assert runtime.base_url == "unix://x.sock"

    def test_process(self):
        runtime = create_runtime(MonitorConfig(runtime="process", process_pattern="python"))

        assert isinstance(runtime, ProcessRuntime)
        assert runtime.compiled_pattern.pattern == "python"

    def test_unknown(self):
        with pytest.raises(ValueError):
            create_runtime(MonitorConfig(runtime="podman"))
