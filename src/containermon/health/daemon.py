"""
Monitoring daemon for container monitor.

Runs polling cycles on a cron schedule and sends notifications when a
container stays unhealthy or recovers.
"""

import logging
import signal
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from containermon.core.config import Config
from containermon.core.models import ContainerObservation, Transition
from containermon.core.runtime import RuntimeClient
from containermon.health.classifier import classify
from containermon.health.scheduler import CronScheduler
from containermon.health.state import MonitorStateStore
from containermon.notify.dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


@dataclass
class ContainerCheck:
    """Outcome of checking one container in a cycle."""

    observation: ContainerObservation
    healthy: bool
    counter: int
    transition: Optional[Transition] = None


class MonitorDaemon:
    """
    Monitoring daemon that runs periodic container checks.

    Owns the monitor state store for the life of the process.
    """

    def __init__(
        self,
        runtime: RuntimeClient,
        dispatcher: NotificationDispatcher,
        config: Config,
        store: Optional[MonitorStateStore] = None,
    ):
        """
        Initialize monitoring daemon.

        Args:
            runtime: Docker runtime client
            dispatcher: Notification dispatcher
            config: Monitor configuration
            store: State store (a new one is created if omitted)
        """
        self.runtime = runtime
        self.dispatcher = dispatcher
        self.config = config
        self.store = store if store is not None else MonitorStateStore()

        self.last_cycle: Optional[datetime] = None
        self.last_error: Optional[str] = None
        self._scheduler: Optional[CronScheduler] = None

    def run_once(self, notify: bool = True) -> list[ContainerCheck]:
        """
        Run a single polling cycle.

        Args:
            notify: Dispatch notifications for transitions decided this cycle

        Returns:
            One ContainerCheck per observed container

        Raises:
            RuntimeClientError: If containers cannot be listed; the store
                is left untouched

        Any error is recorded in last_error before it propagates.
        Transitions recorded before the error are still dispatched.
        """
        start_time = time.time()
        results: list[ContainerCheck] = []

        try:
            with self.store.cycle():
                summaries = self.runtime.list_containers(
                    filter_by_label=self.config.use_labels,
                    include_stopped=self.config.check_stopped,
                )
                self.store.reconcile({s.id: s.name for s in summaries})
                for summary in summaries:
                    results.append(self._check_container(self.runtime.observe(summary)))
        except Exception as e:
            self.last_error = str(e)
            raise
        finally:
            # Sent outside the lock, also when the cycle failed partway
            if notify:
                for result in results:
                    if result.transition:
                        self.dispatcher.dispatch(result.transition)

        self.last_cycle = datetime.now()
        self.last_error = None

        elapsed = time.time() - start_time
        logger.debug(f"Checked {len(results)} containers in {elapsed:.2f}s")

        return results

    def _check_container(self, observation: ContainerObservation) -> ContainerCheck:
        """Classify one container and update its state."""
        healthy = classify(observation, check_exit_code=self.config.check_exit_code)
        kind = self.store.record(
            observation.id,
            healthy,
            fail_limit=self.config.fail_limit,
            notify_healthy=self.config.notify_healthy,
        )

        transition = None
        if kind is not None:
            transition = Transition(
                container_id=observation.id,
                container_name=observation.name,
                kind=kind,
                prefix=self.config.message_prefix,
            )

        entry = self.store.get(observation.id)
        return ContainerCheck(
            observation=observation,
            healthy=healthy,
            counter=entry.counter if entry else 0,
            transition=transition,
        )

    def _scheduled_run(self) -> None:
        """Scheduler callback; a failed cycle is logged and retried next tick."""
        try:
            self.run_once()
        except Exception as e:
            logger.error(f"Error checking containers: {e}")

    def start(self, run_now: bool = False) -> None:
        """
        Start the monitoring daemon.

        Runs until stop() is called or SIGTERM/SIGINT is received.

        Args:
            run_now: Run one cycle immediately instead of waiting for the first tick
        """
        self._scheduler = CronScheduler(self.config.cron_schedule, self._scheduled_run)

        def signal_handler(signum, frame):
            logger.info(f"Received signal {signum}, stopping daemon...")
            self.stop()

        signal.signal(signal.SIGTERM, signal_handler)
        signal.signal(signal.SIGINT, signal_handler)

        logger.info(f"Starting monitor daemon with schedule '{self.config.cron_schedule}'")

        if run_now:
            self._scheduled_run()

        self._scheduler.run()

        logger.info("Monitor daemon stopped")

    def stop(self) -> None:
        """Stop the monitoring daemon."""
        if self._scheduler:
            self._scheduler.stop()

    @property
    def is_running(self) -> bool:
        """Check if daemon is running."""
        return self._scheduler is not None and self._scheduler.is_running


def format_check_table(results: list[ContainerCheck]) -> str:
    """
    Format cycle results as a table.

    Args:
        results: Results from MonitorDaemon.run_once

    Returns:
        Formatted table string
    """
    if not results:
        return "No containers to check."

    lines = []
    header = (
        f"{'CONTAINER':<24} {'ID':<13} {'STATE':<11} {'HEALTH':<10} "
        f"{'OK':<3} {'COUNTER':<8} {'NOTIFY':<8}"
    )
    lines.append(header)
    lines.append("-" * len(header))

    for result in sorted(results, key=lambda r: r.observation.name):
        obs = result.observation
        health = obs.health_status.value if obs.health_status else "-"
        if not obs.inspected:
            health = "?"
        ok = "\u2713" if result.healthy else "\u2717"
        notify = result.transition.kind.value if result.transition else "-"
        lines.append(
            f"{obs.name:<24} {obs.id[:12]:<13} {obs.state.value:<11} {health:<10} "
            f"{ok:<3} {result.counter:<8} {notify:<8}"
        )

    return "\n".join(lines)
