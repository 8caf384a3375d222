"""
Configuration validation utilities.

This module turns raw configuration data (from TOML, environment variables
or the command line) into validated MonitorConfig and ChannelConfig objects.
"""

import logging
from typing import Any, Dict, List

from ..models.config import ChannelConfig, MonitorConfig
from ..validation import (
    ValidationError,
    validate_boolean,
    validate_enum_choice,
    validate_positive_float,
    validate_positive_integer,
    validate_regex_pattern,
    validate_string_list,
    validate_url,
)

logger = logging.getLogger(__name__)

RUNTIME_CHOICES = ["docker", "process"]
CHANNEL_TYPES = ["console", "slack"]


def validate_monitor_config(monitor_data: Dict[str, Any]) -> MonitorConfig:
    """
    Validate and create a MonitorConfig from raw configuration data.

    Args:
        monitor_data: Raw `[monitor]` table, including `[monitor.thresholds]`

    Returns:
        Validated MonitorConfig instance

    Raises:
        ValidationError: If validation fails
    """
    defaults = MonitorConfig()
    thresholds = monitor_data.get("thresholds", {})
    if not isinstance(thresholds, dict):
        raise ValidationError("monitor.thresholds must be a table", field_name="monitor.thresholds")

    interval_seconds = validate_positive_float(
        monitor_data.get("interval_seconds", defaults.interval_seconds),
        min_value=0.1,
        max_value=86400.0,  # 1 day maximum
        field_name="monitor.interval_seconds",
    )

    sample_interval_seconds = validate_positive_float(
        monitor_data.get("sample_interval_seconds", defaults.sample_interval_seconds),
        min_value=0.1,
        max_value=60.0,
        field_name="monitor.sample_interval_seconds",
    )
    if sample_interval_seconds > interval_seconds:
        raise ValidationError(
            f"monitor.sample_interval_seconds ({sample_interval_seconds}) must not exceed "
            f"monitor.interval_seconds ({interval_seconds})",
            field_name="monitor.sample_interval_seconds",
            value=sample_interval_seconds,
        )

    fetch_timeout_seconds = validate_positive_float(
        monitor_data.get("fetch_timeout_seconds", defaults.fetch_timeout_seconds),
        min_value=0.1,
        max_value=600.0,
        field_name="monitor.fetch_timeout_seconds",
    )

    max_concurrent_fetches = validate_positive_integer(
        monitor_data.get("max_concurrent_fetches", defaults.max_concurrent_fetches),
        min_value=1,
        max_value=256,
        field_name="monitor.max_concurrent_fetches",
    )

    runtime = validate_enum_choice(
        monitor_data.get("runtime", defaults.runtime),
        choices=RUNTIME_CHOICES,
        field_name="monitor.runtime",
        case_sensitive=False,
    )

    docker_base_url = monitor_data.get("docker_base_url") or None
    if docker_base_url is not None and not isinstance(docker_base_url, str):
        raise ValidationError("monitor.docker_base_url must be a string", field_name="monitor.docker_base_url")

    process_pattern = monitor_data.get("process_pattern") or None
    if process_pattern is not None:
        process_pattern = validate_regex_pattern(process_pattern, field_name="monitor.process_pattern")

    verbose = validate_boolean(monitor_data.get("verbose", defaults.verbose), field_name="monitor.verbose")

    exclude_pattern = monitor_data.get("exclude_pattern") or None
    if exclude_pattern is not None:
        exclude_pattern = validate_regex_pattern(exclude_pattern, field_name="monitor.exclude_pattern")

    # CPU percent scales with processor count, so it may legitimately exceed 100.
    cpu_threshold = validate_positive_float(
        thresholds.get("cpu_percent", defaults.cpu_threshold),
        min_value=0.0,
        max_value=10000.0,
        field_name="monitor.thresholds.cpu_percent",
    )

    memory_threshold = validate_positive_float(
        thresholds.get("memory_percent", defaults.memory_threshold),
        min_value=0.0,
        max_value=100.0,
        field_name="monitor.thresholds.memory_percent",
    )

    return MonitorConfig(
        interval_seconds=interval_seconds,
        sample_interval_seconds=sample_interval_seconds,
        fetch_timeout_seconds=fetch_timeout_seconds,
        max_concurrent_fetches=max_concurrent_fetches,
        runtime=runtime,
        docker_base_url=docker_base_url,
        process_pattern=process_pattern,
        verbose=verbose,
        exclude_pattern=exclude_pattern,
        cpu_threshold=cpu_threshold,
        memory_threshold=memory_threshold,
    )


def validate_channels_config(channels_data: List[Dict[str, Any]]) -> List[ChannelConfig]:
    """
    Validate the `[[channels]]` array of tables.

    Args:
        channels_data: Raw channel tables

    Returns:
        List of validated ChannelConfig objects

    Raises:
        ValidationError: If any channel is invalid
    """
    if not isinstance(channels_data, list):
        raise ValidationError("channels must be an array of tables", field_name="channels")

    validated_channels = []
    for i, channel_data in enumerate(channels_data):
        prefix = f"channels[{i}]"
        if not isinstance(channel_data, dict):
            raise ValidationError(f"{prefix} must be a table", field_name=prefix)

        channel_type = validate_enum_choice(
            channel_data.get("type", ""),
            choices=CHANNEL_TYPES,
            field_name=f"{prefix}.type",
        )

        throttle_seconds = validate_positive_float(
            channel_data.get("throttle_seconds", 0.0),
            min_value=0.0,
            field_name=f"{prefix}.throttle_seconds",
        )

        tags = channel_data.get("tags")
        if tags is not None:
            tags = frozenset(validate_string_list(tags, field_name=f"{prefix}.tags"))
            if not tags:
                raise ValidationError(
                    f"{prefix}.tags must not be empty; omit it to forward every event",
                    field_name=f"{prefix}.tags",
                    value=channel_data.get("tags"),
                )

        webhook_url = channel_data.get("webhook_url")
        if channel_type == "slack":
            webhook_url = validate_url(webhook_url, field_name=f"{prefix}.webhook_url")

        timeout_seconds = validate_positive_float(
            channel_data.get("timeout_seconds", 10.0),
            min_value=0.1,
            max_value=300.0,
            field_name=f"{prefix}.timeout_seconds",
        )

        validated_channels.append(
            ChannelConfig(
                type=channel_type,
                throttle_seconds=throttle_seconds,
                tags=tags,
                webhook_url=webhook_url,
                emoji=str(channel_data.get("emoji", ":computer:")),
                username=str(channel_data.get("username", "containermon")),
                timeout_seconds=timeout_seconds,
            )
        )

    logger.debug(f"Validated {len(validated_channels)} notification channel(s)")
    return validated_channels
