"""
Notification module for container monitor.

Provides pluggable transports and the dispatcher that fans messages out to them.
"""

from containermon.notify.base import NotificationError, Notifier, get_notifier
from containermon.notify.dispatcher import (
    SENDER_SEPARATOR,
    NotificationDispatcher,
    split_destinations,
)

__all__ = [
    "NotificationError",
    "Notifier",
    "get_notifier",
    "NotificationDispatcher",
    "SENDER_SEPARATOR",
    "split_destinations",
]
