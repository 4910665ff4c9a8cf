"""
Data models for container monitor.

Defines dataclasses for container observations, monitor entries, and
notification transitions.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class ContainerState(Enum):
    """Coarse container lifecycle state as reported by the runtime."""

    CREATED = "created"
    RUNNING = "running"
    PAUSED = "paused"
    RESTARTING = "restarting"
    REMOVING = "removing"
    EXITED = "exited"
    DEAD = "dead"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ContainerState":
        """Parse a runtime state string, mapping unknown values to OTHER."""
        if not value:
            return cls.OTHER
        try:
            return cls(value.lower())
        except ValueError:
            return cls.OTHER


class HealthStatus(Enum):
    """Health-check status values."""

    NONE = "none"
    STARTING = "starting"
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["HealthStatus"]:
        """
        Parse a health-check status string.

        Returns None when the container has no health-check block. Empty
        or unrecognised statuses are UNHEALTHY; only "healthy" passes.
        """
        if value is None:
            return None
        try:
            return cls(value.lower())
        except ValueError:
            return cls.UNHEALTHY


class EntryState(Enum):
    """Per-container debounce state."""

    NORMAL = "normal"
    NOTIFIED = "notified"


class TransitionKind(Enum):
    """Kinds of notification-worthy transitions."""

    FAILURE = "failure"
    RECOVERY = "recovery"


@dataclass
class ContainerSummary:
    """A container as returned by the runtime's list call."""

    id: str
    name: str
    state: ContainerState = ContainerState.OTHER
    labels: dict[str, str] = field(default_factory=dict)

    @property
    def short_id(self) -> str:
        """Get the 12-character short ID."""
        return self.id[:12]


@dataclass
class InspectResult:
    """Detailed state from inspecting a single container."""

    state: ContainerState
    health_status: Optional[HealthStatus] = None
    exit_code: Optional[int] = None


@dataclass
class ContainerObservation:
    """Snapshot of one container for a single polling cycle."""

    id: str
    name: str
    state: ContainerState
    health_status: Optional[HealthStatus] = None
    exit_code: Optional[int] = None
    inspected: bool = True

    @property
    def is_running(self) -> bool:
        """Check if the coarse state is running."""
        return self.state == ContainerState.RUNNING


@dataclass
class MonitorEntry:
    """
    Debounce state for one container.

    While NORMAL, ``failures`` counts consecutive failing cycles. Once the
    failure limit is reached the entry becomes NOTIFIED and stays there until
    the container is healthy again.
    """

    container_id: str
    name: str = ""
    state: EntryState = EntryState.NORMAL
    failures: int = 0
    last_healthy: Optional[bool] = None
    first_seen: datetime = field(default_factory=datetime.now)

    @property
    def notified(self) -> bool:
        """Check if a failure notification was already sent for this run."""
        return self.state == EntryState.NOTIFIED

    @property
    def counter(self) -> int:
        """Signed counter form: 0 healthy, n failing, -1 already notified."""
        if self.notified:
            return -1
        return self.failures


@dataclass
class Transition:
    """A decided notification for one container."""

    container_id: str
    container_name: str
    kind: TransitionKind
    prefix: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def message(self) -> str:
        """Format the notification text."""
        if self.kind == TransitionKind.RECOVERY:
            return f"{self.prefix}Container {self.container_name} is back to healthy"
        return f"{self.prefix}Container {self.container_name} is not healthy"
