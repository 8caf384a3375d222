"""
Alerting: threshold state machines, the notification throttle and the
delivery channels it routes to.
"""

from .channels import ConsoleChannel, SlackChannel, create_channel, format_event
from .state_machine import GRACE_PERIOD_SECONDS, ThresholdStateMachine
from .throttle import DeliveryChannel, NotificationThrottle

__all__ = [
    "ConsoleChannel",
    "SlackChannel",
    "create_channel",
    "format_event",
    "GRACE_PERIOD_SECONDS",
    "ThresholdStateMachine",
    "DeliveryChannel",
    "NotificationThrottle",
]
