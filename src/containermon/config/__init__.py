"""
Configuration management for the containermon package.

This module provides a clean interface for loading, validating, and
accessing configuration from an optional TOML file layered with
environment and command-line overrides.
"""

from .loader import load_main_config, load_toml_file
from .manager import (
    clear_config_cache,
    get_config,
    load_config,
    merge_overrides,
    set_config_path,
)
from .validators import validate_channels_config, validate_monitor_config

__all__ = [
    # Main interface
    "get_config",
    "load_config",
    "set_config_path",
    "clear_config_cache",
    "merge_overrides",
    # Advanced interface
    "load_toml_file",
    "load_main_config",
    "validate_monitor_config",
    "validate_channels_config",
]
