"""
Rate-limited fan-out of alert events to delivery channels.

The throttle decouples how often the state machines produce events from how
often each channel delivers them. Throttled events are dropped, not queued.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple

from ..models.alerts import AlertEvent
from ..validation import ErrorSeverity, handle_delivery_error

logger = logging.getLogger(__name__)


class DeliveryChannel(ABC):
    """
    Capability interface for anything that can receive alert events.

    Attributes:
        name: Label used in logs.
        channel_filter: Tags an event must intersect to be forwarded;
            None forwards every event and an empty set forwards none.
        throttle_window: Minimum seconds between two forwarded events with
            the same throttle key; 0 disables throttling.
    """

    name: str = "channel"

    def __init__(
        self,
        channel_filter: Optional[FrozenSet[str]] = None,
        throttle_window: float = 0.0,
    ):
        self.channel_filter = None if channel_filter is None else frozenset(channel_filter)
        self.throttle_window = throttle_window

    def accepts(self, event: AlertEvent) -> bool:
        if self.channel_filter is None:
            return True
        return bool(self.channel_filter & event.tags)

    @abstractmethod
    def deliver(self, event: AlertEvent) -> None:
        """
        Deliver one event.

        Raises:
            DeliveryFailure: If the event could not be delivered.
        """
        pass


class NotificationThrottle:
    """
    Routes events to channels, applying each channel's filter and throttle.

    The first event for a throttle key is always forwarded; later events
    with that key are dropped until `throttle_window` seconds have passed
    since the last forwarded one. Time comes from a monotonic clock so a
    wall-clock jump never reopens a window early.
    A failed delivery does not use up the window.
    """

    def __init__(
        self,
        channels: Sequence[DeliveryChannel],
        clock: Callable[[], float] = time.monotonic,
    ):
        self.channels: List[DeliveryChannel] = list(channels)
        self.clock = clock
        self._last_forwarded: Dict[int, Dict[FrozenSet[str], float]] = {}
        self._lock = threading.Lock()
        self.stats = {
            "events_received": 0,
            "events_forwarded": 0,
            "events_filtered": 0,
            "events_throttled": 0,
            "delivery_failures": 0,
        }

    def publish(self, event: AlertEvent) -> int:
        """
        Offer an event to every channel.

        Returns:
            Number of channels that delivered the event successfully.
        """
        delivered = 0
        with self._lock:
            self.stats["events_received"] += 1
            claims = []
            for channel in self.channels:
                forward, previous = self._should_forward(channel, event)
                if forward:
                    claims.append((channel, previous))

        for channel, previous in claims:
            try:
                channel.deliver(event)
                delivered += 1
            except Exception as e:
                with self._lock:
                    self.stats["delivery_failures"] += 1
                    self._release_window(channel, event, previous)
                handle_delivery_error(
                    e,
                    channel.name,
                    severity=ErrorSeverity.ERROR,
                    reraise=False,
                    logger=logger,
                )

        with self._lock:
            self.stats["events_forwarded"] += delivered
        return delivered

    def _should_forward(
        self, channel: DeliveryChannel, event: AlertEvent
    ) -> Tuple[bool, Optional[float]]:
        """
        Check filter and throttle, claiming the window if forwarding. Caller holds the lock.

        Returns:
            Whether to forward, and the timestamp the claim replaced so a
            failed delivery can put it back.
        """
        if not channel.accepts(event):
            self.stats["events_filtered"] += 1
            return False, None

        if channel.throttle_window <= 0:
            return True, None

        now = self.clock()
        key = event.throttle_key
        last_times = self._last_forwarded.setdefault(id(channel), {})
        last = last_times.get(key)
        if last is not None and now - last < channel.throttle_window:
            self.stats["events_throttled"] += 1
            logger.debug(
                f"Throttled {sorted(key)} event for {event.display_name} on "
                f"{channel.name} ({now - last:.1f}s < {channel.throttle_window}s)"
            )
            return False, None

        last_times[key] = now
        return True, last

    def _release_window(
        self, channel: DeliveryChannel, event: AlertEvent, previous: Optional[float]
    ) -> None:
        """Undo the claim made for an event that failed to deliver. Caller holds the lock."""
        if channel.throttle_window <= 0:
            return
        last_times = self._last_forwarded.get(id(channel), {})
        if previous is None:
            last_times.pop(event.throttle_key, None)
        else:
            last_times[event.throttle_key] = previous
