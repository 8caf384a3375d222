"""
Delivery channels for alert events.

ConsoleChannel writes alert lines through the `containermon.alerts` logger;
SlackChannel posts them to a Slack incoming webhook.
"""

import logging
from typing import Any, Dict, FrozenSet, Optional

import requests

from ..models.alerts import AlertEvent, Severity
from ..models.config import ChannelConfig
from ..models.entities import MetricKind
from ..validation import DeliveryFailure
from .throttle import DeliveryChannel

logger = logging.getLogger(__name__)
alert_logger = logging.getLogger("containermon.alerts")

_METRIC_LABELS = {
    MetricKind.CPU: "CPU",
    MetricKind.MEMORY: "Memory",
}

_CAPACITY_LABELS = {
    MetricKind.CPU: "CPU capacity",
    MetricKind.MEMORY: "memory limit",
}

SEVERITY_COLORS = {
    Severity.WARNING: "#ff9500",
    Severity.RESTORED: "#36a64f",
    Severity.INFO: "#439fe0",
}

DEFAULT_SLACK_TAGS = frozenset({Severity.WARNING.value, Severity.RESTORED.value})


def format_event(event: AlertEvent) -> str:
    """Render an event as a single human-readable line."""
    label = _METRIC_LABELS[event.metric_kind]
    value = f"{event.value:.0f}"
    if event.severity == Severity.WARNING:
        return (
            f"WARNING: Container {event.display_name} has been at {value}% "
            f"{label} usage for {event.breach_seconds:.0f} seconds"
        )
    if event.severity == Severity.RESTORED:
        return f"OKAY: Container {event.display_name} {label} is now at {value}%"
    return (
        f"Container {event.display_name} is using {value}% of its "
        f"{_CAPACITY_LABELS[event.metric_kind]}"
    )


class ConsoleChannel(DeliveryChannel):
    """Logs each event; warnings at WARNING level, everything else at INFO."""

    name = "console"

    def deliver(self, event: AlertEvent) -> None:
        level = logging.WARNING if event.severity == Severity.WARNING else logging.INFO
        alert_logger.log(level, format_event(event))


class SlackChannel(DeliveryChannel):
    """
    Posts events to a Slack incoming webhook.

    Args:
        webhook_url: The incoming-webhook URL.
        emoji: Icon emoji, colon-wrapped (e.g. ":computer:").
        username: Bot name shown in Slack.
        timeout: HTTP timeout in seconds.
        channel_filter: Defaults to warnings and recoveries only.
        throttle_window: Seconds between repeats of the same tag set.
        session: Optional requests session, mainly for tests.
    """

    name = "slack"

    def __init__(
        self,
        webhook_url: str,
        emoji: str = ":computer:",
        username: str = "containermon",
        timeout: float = 10.0,
        channel_filter: Optional[FrozenSet[str]] = DEFAULT_SLACK_TAGS,
        throttle_window: float = 0.0,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(channel_filter=channel_filter, throttle_window=throttle_window)
        self.webhook_url = webhook_url
        self.emoji = emoji
        self.username = username
        self.timeout = timeout
        self.session = session or requests.Session()

    def build_payload(self, event: AlertEvent) -> Dict[str, Any]:
        text = format_event(event)
        return {
            "text": text,
            "username": self.username,
            "icon_emoji": self.emoji,
            "attachments": [
                {
                    "fallback": text,
                    "color": SEVERITY_COLORS[event.severity],
                    "fields": [
                        {"title": "Container", "value": event.display_name, "short": True},
                        {"title": "Metric", "value": event.metric_kind.value, "short": True},
                        {"title": "Value", "value": f"{event.value:.1f}%", "short": True},
                        {"title": "Threshold", "value": f"{event.threshold:.0f}%", "short": True},
                    ],
                    "ts": int(event.timestamp.timestamp()),
                }
            ],
        }

    def deliver(self, event: AlertEvent) -> None:
        try:
            response = self.session.post(
                self.webhook_url, json=self.build_payload(event), timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise DeliveryFailure(f"Slack webhook request failed: {e}", channel=self.name) from e
        logger.debug(f"Delivered {event.severity.value} for {event.display_name} to Slack")


def create_channel(config: ChannelConfig) -> DeliveryChannel:
    """
    Build a delivery channel from its configuration.

    Raises:
        ValueError: If the channel type is unknown.
    """
    if config.type == "console":
        return ConsoleChannel(
            channel_filter=config.tags,
            throttle_window=config.throttle_seconds,
        )
    elif config.type == "slack":
        return SlackChannel(
            webhook_url=config.webhook_url,
            emoji=config.emoji,
            username=config.username,
            timeout=config.timeout_seconds,
            channel_filter=config.tags if config.tags is not None else DEFAULT_SLACK_TAGS,
            throttle_window=config.throttle_seconds,
        )
    else:
        raise ValueError(f"Unknown channel type: {config.type}")
