"""Notification sink registry: pluggable buyer notice delivery.

Provides singleton access to the sink adapter. Uses the fake sink by
default; a real transport can be selected with NOTIFICATION_ADAPTER.
"""

import os

from notifications.channel.port import NotificationSink

_sink_instance: NotificationSink | None = None


def get_sink() -> NotificationSink:
    """Return the configured notification sink (singleton)."""
    global _sink_instance
    if _sink_instance is None:
        adapter = os.environ.get("NOTIFICATION_ADAPTER", "fake")
        if adapter == "fake":
            from notifications.channel.fake_sink import FakeNotificationSink

            _sink_instance = FakeNotificationSink()
        else:
            raise ValueError(f"Unknown notification adapter: {adapter}")
    return _sink_instance


def set_sink(sink: NotificationSink) -> None:
    global _sink_instance
    _sink_instance = sink


def reset_sink():
    """Reset the sink singleton (useful for testing)."""
    global _sink_instance
    _sink_instance = None
