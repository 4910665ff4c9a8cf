"""
Monitor state store.

Keeps the per-container debounce state between polling cycles and decides
when a container crosses the failure threshold or recovers.
"""

import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Optional

from containermon.core.models import EntryState, MonitorEntry, TransitionKind

logger = logging.getLogger(__name__)


class MonitorStateStore:
    """
    Per-container failure tracking.

    The store holds exactly the containers seen in the latest cycle. Callers
    wrap a whole cycle in ``cycle()`` so readers on other threads never see
    a half-reconciled store.
    """

    def __init__(self):
        """Initialize an empty store."""
        self._entries: dict[str, MonitorEntry] = {}
        self._lock = threading.RLock()

    @contextmanager
    def cycle(self) -> Iterator["MonitorStateStore"]:
        """Hold the store lock for the duration of one polling cycle."""
        with self._lock:
            yield self

    def reconcile(self, current: dict[str, str] | Iterable[str]) -> None:
        """
        Match the store to the containers observed this cycle.

        Entries for containers no longer present are dropped, and new
        containers get a fresh entry with no failures.

        Args:
            current: Container IDs observed this cycle, or a mapping of
                container ID to display name
        """
        names = current if isinstance(current, dict) else dict.fromkeys(current, "")

        with self._lock:
            for container_id in list(self._entries):
                if container_id not in names:
                    entry = self._entries.pop(container_id)
                    logger.debug(f"Dropping state for {entry.name or container_id[:12]}")

            for container_id, name in names.items():
                entry = self._entries.get(container_id)
                if entry is None:
                    self._entries[container_id] = MonitorEntry(
                        container_id=container_id, name=name
                    )
                elif name:
                    entry.name = name

    def record(
        self,
        container_id: str,
        healthy: bool,
        fail_limit: int,
        notify_healthy: bool = True,
    ) -> Optional[TransitionKind]:
        """
        Record one cycle's verdict for a container.

        Args:
            container_id: Container ID (must already be reconciled)
            healthy: Verdict for this cycle
            fail_limit: Consecutive failures needed before notifying
            notify_healthy: Whether recoveries are reported

        Returns:
            The transition to notify about, or None
        """
        with self._lock:
            entry = self._entries.get(container_id)
            if entry is None:
                raise KeyError(container_id)

            entry.last_healthy = healthy

            if healthy:
                was_notified = entry.notified
                entry.state = EntryState.NORMAL
                entry.failures = 0
                if was_notified and notify_healthy:
                    return TransitionKind.RECOVERY
                return None

            # Already reported for this run of failures
            if entry.notified:
                return None

            entry.failures += 1
            if entry.failures >= fail_limit:
                entry.state = EntryState.NOTIFIED
                entry.failures = 0
                return TransitionKind.FAILURE

            return None

    def get(self, container_id: str) -> Optional[MonitorEntry]:
        """Get the entry for a container, if tracked."""
        with self._lock:
            return self._entries.get(container_id)

    def snapshot(self) -> list[MonitorEntry]:
        """Get a copy of all entries, ordered by name."""
        with self._lock:
            entries = [
                MonitorEntry(
                    container_id=e.container_id,
                    name=e.name,
                    state=e.state,
                    failures=e.failures,
                    last_healthy=e.last_healthy,
                    first_seen=e.first_seen,
                )
                for e in self._entries.values()
            ]
        return sorted(entries, key=lambda e: (e.name, e.container_id))

    def clear(self) -> None:
        """Forget all containers."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, container_id: object) -> bool:
        with self._lock:
            return container_id in self._entries
