"""
Unit tests for alert formatting and the console and Slack channels.
"""

import logging
from datetime import datetime
from unittest.mock import Mock

import pytest
import requests

from containermon.alerting.channels import (
    DEFAULT_SLACK_TAGS,
    ConsoleChannel,
    SlackChannel,
    create_channel,
    format_event,
)
from containermon.models import AlertEvent, ChannelConfig, MetricKind, Severity, event_tags
from containermon.validation import DeliveryFailure

WEBHOOK = "https://hooks.slack.com/services/T000/B000/XXXX"


def make_event(severity, metric=MetricKind.CPU, value=95.4, breach_count=3):
    return AlertEvent(
        entity_id="abc123",
        display_name="web",
        metric_kind=metric,
        severity=severity,
        value=value,
        tags=event_tags(metric, severity),
        threshold=90.0,
        breach_count=breach_count,
        breach_seconds=breach_count * 10.0,
        timestamp=datetime(2024, 1, 2, 3, 4, 5),
    )


@pytest.mark.unit
class TestFormatEvent:
    """Test cases for the human-readable alert line."""

    def test_warning(self):
        text = format_event(make_event(Severity.WARNING))
        assert text == "WARNING: Container web has been at 95% CPU usage for 30 seconds"

    def test_restored(self):
        text = format_event(make_event(Severity.RESTORED, metric=MetricKind.MEMORY, value=42.0))
        assert text == "OKAY: Container web Memory is now at 42%"

    def test_info(self):
        assert format_event(make_event(Severity.INFO, value=12.0)) == (
            "Container web is using 12% of its CPU capacity"
        )
        assert format_event(make_event(Severity.INFO, metric=MetricKind.MEMORY, value=12.0)) == (
            "Container web is using 12% of its memory limit"
        )


@pytest.mark.unit
class TestConsoleChannel:
    """Test cases for ConsoleChannel."""

    def test_warning_logged_at_warning_level(self, caplog):
        with caplog.at_level(logging.INFO, logger="containermon.alerts"):
            ConsoleChannel().deliver(make_event(Severity.WARNING))

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert "WARNING: Container web" in record.getMessage()

    def test_restored_logged_at_info_level(self, caplog):
        with caplog.at_level(logging.INFO, logger="containermon.alerts"):
            ConsoleChannel().deliver(make_event(Severity.RESTORED))

        assert caplog.records[-1].levelno == logging.INFO


@pytest.mark.unit
class TestSlackChannel:
    """Test cases for SlackChannel."""

    def test_payload(self):
        channel = SlackChannel(WEBHOOK, emoji=":monkey_face:", session=Mock())
        payload = channel.build_payload(make_event(Severity.WARNING))

        assert payload["text"].startswith("WARNING: Container web")
        assert payload["icon_emoji"] == ":monkey_face:"
        assert payload["username"] == "containermon"
        attachment = payload["attachments"][0]
        assert attachment["color"] == "#ff9500"
        fields = {f["title"]: f["value"] for f in attachment["fields"]}
        assert fields == {"Container": "web", "Metric": "cpu", "Value": "95.4%", "Threshold": "90%"}

    def test_deliver_posts_json(self):
        session = Mock()
        channel = SlackChannel(WEBHOOK, timeout=3.0, session=session)

        channel.deliver(make_event(Severity.RESTORED))

        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        assert args == (WEBHOOK,)
        assert kwargs["timeout"] == 3.0
        assert kwargs["json"]["text"].startswith("OKAY:")
        session.post.return_value.raise_for_status.assert_called_once()

    def test_http_error_becomes_delivery_failure(self):
        session = Mock()
        session.post.return_value.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
        channel = SlackChannel(WEBHOOK, session=session)

        with pytest.raises(DeliveryFailure) as exc_info:
            channel.deliver(make_event(Severity.WARNING))

        assert exc_info.value.channel == "slack"

    def test_connection_error_becomes_delivery_failure(self):
        session = Mock()
        session.post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(DeliveryFailure):
            SlackChannel(WEBHOOK, session=session).deliver(make_event(Severity.WARNING))

    def test_default_filter_drops_info(self):
        channel = SlackChannel(WEBHOOK, session=Mock())

        assert channel.accepts(make_event(Severity.WARNING))
        assert channel.accepts(make_event(Severity.RESTORED))
        assert not channel.accepts(make_event(Severity.INFO))


@pytest.mark.unit
class TestCreateChannel:
    """Test cases for the channel factory."""

    def test_console(self):
        channel = create_channel(ChannelConfig(type="console", throttle_seconds=5))

        assert isinstance(channel, ConsoleChannel)
        assert channel.throttle_window == 5
        assert channel.channel_filter is None

    def test_slack_defaults_to_warning_and_restored(self):
        channel = create_channel(ChannelConfig(type="slack", webhook_url=WEBHOOK, throttle_seconds=60))

        assert isinstance(channel, SlackChannel)
        assert channel.channel_filter == DEFAULT_SLACK_TAGS
        assert channel.throttle_window == 60

    def test_slack_custom_tags(self):
        config = ChannelConfig(type="slack", webhook_url=WEBHOOK, tags=frozenset({"memory"}))
        assert create_channel(config).channel_filter == frozenset({"memory"})

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            create_channel(ChannelConfig(type="pager"))
