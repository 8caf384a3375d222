"""
Unit tests for the notification throttle.
"""

import pytest

from containermon.alerting.throttle import NotificationThrottle
from containermon.models import AlertEvent, MetricKind, Severity, event_tags

from fakes import FakeClock, RecordingChannel


def make_event(severity=Severity.WARNING, metric=MetricKind.CPU, name="web", value=95.0):
    return AlertEvent(
        entity_id=f"{name}-id",
        display_name=name,
        metric_kind=metric,
        severity=severity,
        value=value,
        tags=event_tags(metric, severity),
    )


@pytest.mark.unit
class TestNotificationThrottle:
    """Test cases for NotificationThrottle.publish."""

    def test_unthrottled_channel_receives_everything(self):
        channel = RecordingChannel()
        throttle = NotificationThrottle([channel], clock=FakeClock())

        for _ in range(3):
            throttle.publish(make_event())

        assert len(channel.events) == 3

    def test_repeats_within_window_are_dropped(self):
        clock = FakeClock(0.0)
        channel = RecordingChannel(throttle_window=60)
        throttle = NotificationThrottle([channel], clock=clock)

        throttle.publish(make_event())
        clock.advance(1)
        assert throttle.publish(make_event()) == 0

        assert len(channel.events) == 1
        assert throttle.stats["events_throttled"] == 1

    def test_window_reopens_after_elapsed(self):
        clock = FakeClock(0.0)
        channel = RecordingChannel(throttle_window=60)
        throttle = NotificationThrottle([channel], clock=clock)

        throttle.publish(make_event())
        clock.advance(61)
        throttle.publish(make_event())

        assert len(channel.events) == 2

    def test_dropped_events_do_not_extend_window(self):
        clock = FakeClock(0.0)
        channel = RecordingChannel(throttle_window=60)
        throttle = NotificationThrottle([channel], clock=clock)

        throttle.publish(make_event())
        clock.advance(30)
        throttle.publish(make_event())
        clock.advance(31)
        throttle.publish(make_event())

        assert len(channel.events) == 2

    def test_key_is_the_tag_set(self):
        clock = FakeClock(0.0)
        channel = RecordingChannel(throttle_window=60)
        throttle = NotificationThrottle([channel], clock=clock)

        throttle.publish(make_event(name="web"))
        # Same tags, different container: still throttled.
        throttle.publish(make_event(name="db"))
        throttle.publish(make_event(metric=MetricKind.MEMORY))
        throttle.publish(make_event(severity=Severity.RESTORED))

        assert [e.display_name for e in channel.events] == ["web", "web", "web"]
        assert [e.tags for e in channel.events] == [
            frozenset({"cpu", "warning"}),
            frozenset({"memory", "warning"}),
            frozenset({"cpu", "restored"}),
        ]

    def test_windows_are_per_channel(self):
        clock = FakeClock(0.0)
        slow = RecordingChannel(throttle_window=60)
        fast = RecordingChannel()
        throttle = NotificationThrottle([slow, fast], clock=clock)

        throttle.publish(make_event())
        clock.advance(1)
        throttle.publish(make_event())

        assert len(slow.events) == 1
        assert len(fast.events) == 2

    def test_channel_filter(self):
        channel = RecordingChannel(channel_filter=frozenset({"warning", "restored"}))
        throttle = NotificationThrottle([channel], clock=FakeClock())

        throttle.publish(make_event(severity=Severity.INFO))
        throttle.publish(make_event(severity=Severity.WARNING))

        assert [e.severity for e in channel.events] == [Severity.WARNING]
        assert throttle.stats["events_filtered"] == 1

    def test_filtered_event_does_not_claim_window(self):
        clock = FakeClock(0.0)
        channel = RecordingChannel(channel_filter=frozenset({"memory"}), throttle_window=60)
        throttle = NotificationThrottle([channel], clock=clock)

        throttle.publish(make_event(metric=MetricKind.CPU))
        throttle.publish(make_event(metric=MetricKind.MEMORY))

        assert len(channel.events) == 1

    def test_delivery_failure_is_isolated(self):
        broken = RecordingChannel(fail=True)
        healthy = RecordingChannel()
        throttle = NotificationThrottle([broken, healthy], clock=FakeClock())

        delivered = throttle.publish(make_event())

        assert delivered == 1
        assert len(healthy.events) == 1
        assert throttle.stats["delivery_failures"] == 1
        assert throttle.stats["events_forwarded"] == 1

    def test_failed_delivery_does_not_claim_window(self):
        clock = FakeClock(0.0)
        channel = RecordingChannel(throttle_window=60, fail=True)
        throttle = NotificationThrottle([channel], clock=clock)

        assert throttle.publish(make_event()) == 0
        channel.fail = False
        clock.advance(10)
        assert throttle.publish(make_event()) == 1

        # The successful delivery holds the window.
        clock.advance(1)
        assert throttle.publish(make_event()) == 0
        assert len(channel.events) == 1
        assert throttle.stats["events_throttled"] == 1

    def test_failed_delivery_restores_earlier_window(self):
        clock = FakeClock(0.0)
        channel = RecordingChannel(throttle_window=60)
        throttle = NotificationThrottle([channel], clock=clock)

        throttle.publish(make_event())
        clock.advance(61)
        channel.fail = True
        throttle.publish(make_event())
        channel.fail = False
        clock.advance(1)

        assert throttle.publish(make_event()) == 1
        assert len(channel.events) == 2

    def test_empty_filter_forwards_nothing(self):
        channel = RecordingChannel(channel_filter=frozenset())
        throttle = NotificationThrottle([channel], clock=FakeClock())

        throttle.publish(make_event(severity=Severity.WARNING))
        throttle.publish(make_event(severity=Severity.RESTORED))

        assert channel.events == []
        assert throttle.stats["events_filtered"] == 2

    def test_no_channels(self):
        throttle = NotificationThrottle([], clock=FakeClock())

        assert throttle.publish(make_event()) == 0
        assert throttle.stats["events_received"] == 1
