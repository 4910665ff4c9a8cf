"""
Notification dispatch.

Turns transitions into messages and fans them out to every configured
destination. Delivery failures are logged and never raised.
"""

import logging
from typing import Callable

from containermon.core.config import Config
from containermon.core.models import Transition, TransitionKind
from containermon.notify.base import DEFAULT_TIMEOUT, Notifier, get_notifier

logger = logging.getLogger(__name__)

# Separates multiple destinations within one URL setting
SENDER_SEPARATOR = "|"


def split_destinations(urls: str) -> list[str]:
    """Split a destination setting into individual URLs, dropping blanks."""
    return [url.strip() for url in urls.split(SENDER_SEPARATOR) if url.strip()]


class NotificationDispatcher:
    """Sends transition messages to failure or recovery destinations."""

    def __init__(
        self,
        failure_url: str = "",
        recovery_url: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        notifier_factory: Callable[[str, float], Notifier] = get_notifier,
    ):
        """
        Initialize dispatcher.

        Args:
            failure_url: Destination(s) for failure notifications
            recovery_url: Destination(s) for recovery notifications,
                defaults to failure_url when empty
            timeout: Per-destination timeout in seconds
            notifier_factory: Builds a notifier for one destination URL
        """
        self.failure_url = failure_url
        self.recovery_url = recovery_url or failure_url
        self.timeout = timeout
        self._notifier_factory = notifier_factory

    @classmethod
    def from_config(cls, config: Config) -> "NotificationDispatcher":
        """Create a dispatcher from configuration."""
        return cls(
            failure_url=config.notification_url,
            recovery_url=config.recovery_notification_url,
            timeout=config.notification_timeout,
        )

    def send(self, destination: str, message: str) -> bool:
        """
        Send a message to a single destination.

        Args:
            destination: Destination URL
            message: Text to send

        Returns:
            True if the message was delivered
        """
        try:
            notifier = self._notifier_factory(destination, self.timeout)
            notifier.send(message)
            return True
        except Exception as e:
            logger.error(f"Error sending notification: {e}")
            return False

    def send_all(self, urls: str, message: str) -> int:
        """
        Send a message to every destination in a separated URL setting.

        Each destination is attempted independently.

        Returns:
            Number of destinations that received the message
        """
        destinations = split_destinations(urls)
        if not destinations:
            logger.debug("No notification destination configured")
            return 0

        delivered = 0
        for destination in destinations:
            if self.send(destination, message):
                delivered += 1
        return delivered

    def dispatch(self, transition: Transition) -> int:
        """
        Send the notification for a transition.

        Args:
            transition: Decided failure or recovery transition

        Returns:
            Number of destinations that received the message
        """
        message = transition.message
        logger.info(message)

        if transition.kind == TransitionKind.RECOVERY:
            return self.send_all(self.recovery_url, message)
        return self.send_all(self.failure_url, message)
