"""
Configuration management and singleton pattern.

This module provides the main configuration loading and management
interface. Values are layered: built-in defaults, then the TOML file (if a
path is set), then overrides collected from the environment and command
line.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ..models.config import AppConfig, ChannelConfig
from ..validation import handle_config_error, ErrorSeverity
from .loader import load_main_config
from .validators import validate_channels_config, validate_monitor_config

logger = logging.getLogger(__name__)

# --- Global Singleton for Configuration ---

_CONFIG: Optional[AppConfig] = None

# No file by default: the monitor runs on built-in defaults plus overrides.
_CONFIG_FILE_PATH: Optional[Path] = None


def set_config_path(config_path: Optional[Path]) -> None:
    """
    Set the configuration file path.

    This must be called before the first call to get_config() to have any
    effect; it clears any cached configuration.
    """
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = config_path
    _CONFIG = None
    logger.info(f"Configuration path set to: {config_path}")


def clear_config_cache() -> None:
    """Clear the cached configuration, forcing a reload on next access."""
    global _CONFIG
    _CONFIG = None
    logger.debug("Configuration cache cleared")


def merge_overrides(data: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Layer override values over raw configuration data.

    `monitor` keys (and `monitor.thresholds` keys) replace file values;
    override `channels` are appended to the file's channels.
    """
    merged = copy.deepcopy(data)
    if not overrides:
        return merged

    monitor = merged.setdefault("monitor", {})
    for key, value in overrides.get("monitor", {}).items():
        if key == "thresholds":
            monitor.setdefault("thresholds", {}).update(value)
        else:
            monitor[key] = value

    if overrides.get("channels"):
        merged.setdefault("channels", []).extend(overrides["channels"])
    return merged


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> AppConfig:
    """
    Load and validate the complete application configuration.

    Args:
        config_path: Optional path to a config.toml file
        overrides: Values from the environment / command line

    Returns:
        Fully validated AppConfig instance

    Raises:
        FileNotFoundError: If the configuration file is missing
        ValidationError: If configuration validation fails
        tomllib.TOMLDecodeError: If the TOML file is malformed
    """
    try:
        raw_data = load_main_config(config_path) if config_path is not None else {}
        data = merge_overrides(raw_data, overrides)

        monitor_config = validate_monitor_config(data.get("monitor", {}))
        channels = validate_channels_config(data.get("channels", []))
        if not channels:
            logger.debug("No notification channels configured, using console")
            channels = [ChannelConfig(type="console")]

        app_config = AppConfig(monitor=monitor_config, channels=channels)
        logger.info(
            f"Loaded configuration: runtime={monitor_config.runtime}, "
            f"{len(channels)} channel(s) ({', '.join(c.type for c in channels)})"
        )
        return app_config

    except FileNotFoundError as e:
        handle_config_error(
            error=e,
            context="loading configuration file",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise
    except Exception as e:
        handle_config_error(
            error=e,
            context="processing configuration",
            severity=ErrorSeverity.ERROR,
            reraise=True,
            logger=logger
        )
        raise


def get_config(overrides: Optional[Dict[str, Any]] = None) -> AppConfig:
    """
    Get the global application configuration, loading it if necessary.

    `overrides` only take effect on the call that performs the load.
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = load_config(_CONFIG_FILE_PATH, overrides)
    return _CONFIG
