"""
Cron scheduler for container monitor.

Runs a callback on every tick of a cron expression. Ticks that pass while
the callback is still running are skipped, not replayed.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from croniter import croniter

logger = logging.getLogger(__name__)


class CronScheduler:
    """Invokes a zero-argument callback on a cron schedule."""

    def __init__(self, expression: str, callback: Callable[[], object]):
        """
        Initialize scheduler.

        Args:
            expression: Cron expression (e.g. "*/5 * * * *")
            callback: Function to call on each tick

        Raises:
            ValueError: If the cron expression is invalid
        """
        if not croniter.is_valid(expression):
            raise ValueError(f"Invalid cron expression: {expression}")

        self.expression = expression
        self.callback = callback
        self._stop_event = threading.Event()
        self._running = False

    def next_run(self, after: Optional[datetime] = None) -> datetime:
        """
        Get the next tick strictly after a reference time.

        Args:
            after: Reference time (default: now)

        Returns:
            Datetime of the next tick
        """
        reference = after or datetime.now()
        return croniter(self.expression, reference).get_next(datetime)

    def run_pending(self) -> None:
        """Invoke the callback once, logging any error it raises."""
        try:
            self.callback()
        except Exception as e:
            logger.error(f"Scheduled run failed: {e}")

    def run(self) -> None:
        """
        Run the schedule until stop() is called.

        Blocks the calling thread. A stop() issued before run() starts
        makes it return immediately.
        """
        self._running = True

        try:
            while not self._stop_event.is_set():
                now = datetime.now()
                next_time = self.next_run(now)
                wait = (next_time - now).total_seconds()
                logger.debug(f"Next run at {next_time.isoformat()}")

                if self._stop_event.wait(max(0.0, wait)):
                    break
                self.run_pending()
        finally:
            self._running = False

    def stop(self) -> None:
        """Stop the scheduler after the current callback finishes."""
        self._stop_event.set()

    @property
    def is_running(self) -> bool:
        """Check if the scheduler loop is active."""
        return self._running
