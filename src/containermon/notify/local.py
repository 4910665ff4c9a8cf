"""
Local notifiers that write to a file or to the application log.
"""

import logging
from datetime import datetime
from pathlib import Path
from urllib.parse import unquote, urlsplit

from containermon.notify.base import NotificationError, Notifier

logger = logging.getLogger(__name__)


class FileNotifier(Notifier):
    """Notifier that appends timestamped lines to a file."""

    def __init__(self, url: str, timeout: float = 10.0):
        """
        Initialize file notifier.

        Args:
            url: file:///path/to/file
            timeout: Unused, accepted for a uniform factory signature
        """
        super().__init__(url, timeout)
        path = unquote(urlsplit(url).path)
        if not path:
            raise ValueError("File URL must be file:///path/to/file")
        self.path = Path(path)

    def send(self, message: str) -> None:
        """Append message to the file."""
        ts = datetime.now().astimezone().isoformat(timespec="seconds")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a") as f:
                f.write(f"{ts} | {message}\n")
        except OSError as e:
            raise NotificationError(f"Failed to write to {self.path}: {e}") from e


class LoggerNotifier(Notifier):
    """Notifier that writes to the application log at WARNING level."""

    def send(self, message: str) -> None:
        logger.warning(message)
