"""
Base classes for notification transports.

Defines the abstract notifier interface and a factory that picks a
transport from the destination URL's scheme.
"""

from abc import ABC, abstractmethod
from urllib.parse import urlsplit

DEFAULT_TIMEOUT = 10.0


class NotificationError(Exception):
    """Raised when a notification cannot be delivered."""


class Notifier(ABC):
    """Abstract base class for notification transports."""

    def __init__(self, url: str, timeout: float = DEFAULT_TIMEOUT):
        """
        Initialize notifier.

        Args:
            url: Destination URL
            timeout: Request timeout in seconds
        """
        self.url = url
        self.timeout = timeout

    @property
    def service(self) -> str:
        """Get the service name (URL scheme) for logging."""
        return urlsplit(self.url).scheme

    @abstractmethod
    def send(self, message: str) -> None:
        """
        Deliver a message.

        Args:
            message: Text to send

        Raises:
            NotificationError: If delivery failed
        """
        pass


def get_notifier(url: str, timeout: float = DEFAULT_TIMEOUT) -> Notifier:
    """
    Factory function to create the notifier for a destination URL.

    Supported schemes:
    - http, https: Generic JSON webhook
    - slack: Slack incoming webhook (slack://[botname@]token-a/token-b/token-c)
    - discord: Discord webhook (discord://token@webhook-id)
    - file: Append to a local file (file:///path/to/file)
    - logger: Write to the application log (logger://)

    Args:
        url: Destination URL
        timeout: Request timeout in seconds

    Returns:
        Notifier subclass instance

    Raises:
        ValueError: If the URL scheme is not supported
    """
    scheme = urlsplit(url).scheme.lower()

    if scheme in ("http", "https"):
        from containermon.notify.webhook import WebhookNotifier
        return WebhookNotifier(url, timeout)

    elif scheme == "slack":
        from containermon.notify.webhook import SlackNotifier
        return SlackNotifier(url, timeout)

    elif scheme == "discord":
        from containermon.notify.webhook import DiscordNotifier
        return DiscordNotifier(url, timeout)

    elif scheme == "file":
        from containermon.notify.local import FileNotifier
        return FileNotifier(url, timeout)

    elif scheme == "logger":
        from containermon.notify.local import LoggerNotifier
        return LoggerNotifier(url, timeout)

    else:
        raise ValueError(f"Unsupported notification service: {scheme or url!r}")
