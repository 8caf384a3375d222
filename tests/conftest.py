"""
Pytest configuration and shared fixtures for the containermon test suite.

This module provides common fixtures and configuration helpers for all
test modules. Test doubles live in `fakes.py`.
"""

import sys
from pathlib import Path

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from containermon.config import clear_config_cache, set_config_path  # noqa: E402
from containermon.models import MonitorConfig  # noqa: E402
from fakes import FakeClock, RecordingChannel  # noqa: E402


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def recording_channel():
    return RecordingChannel()


@pytest.fixture
def monitor_config():
    """Monitor configuration with thresholds at 90% and no exclusions."""
    return MonitorConfig(
        interval_seconds=10.0,
        sample_interval_seconds=2.0,
        fetch_timeout_seconds=5.0,
        max_concurrent_fetches=4,
        runtime="docker",
        verbose=False,
        exclude_pattern=None,
        cpu_threshold=90.0,
        memory_threshold=90.0,
    )


@pytest.fixture
def sample_config_data():
    """Sample raw configuration data, as parsed from config.toml."""
    return {
        "monitor": {
            "interval_seconds": 10,
            "sample_interval_seconds": 2,
            "fetch_timeout_seconds": 15,
            "max_concurrent_fetches": 8,
            "runtime": "docker",
            "verbose": False,
            "exclude_pattern": "^ignored-",
            "thresholds": {
                "cpu_percent": 85,
                "memory_percent": 75,
            },
        },
        "channels": [
            {"type": "console"},
            {
                "type": "slack",
                "webhook_url": "https://hooks.slack.com/services/T000/B000/XXXX",
                "throttle_seconds": 60,
                "tags": ["warning", "restored"],
            },
        ],
    }


@pytest.fixture
def temp_config_file(tmp_path):
    """Write a config.toml into a temporary directory and return its path."""

    def _write(content: str) -> Path:
        path = tmp_path / "config.toml"
        path.write_text(content)
        return path

    return _write


@pytest.fixture(autouse=True)
def reset_config_singleton():
    """Isolate tests from the global configuration singleton."""
    set_config_path(None)
    clear_config_cache()
    yield
    set_config_path(None)
    clear_config_cache()
