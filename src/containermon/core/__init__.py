"""
Core components for container monitor.

Provides configuration, data models, and the Docker runtime client.
"""

from containermon.core.config import Config, load_config
from containermon.core.models import (
    ContainerObservation,
    ContainerState,
    ContainerSummary,
    EntryState,
    HealthStatus,
    InspectResult,
    MonitorEntry,
    Transition,
    TransitionKind,
)
from containermon.core.runtime import (
    CONTAINER_LABEL,
    RuntimeClient,
    RuntimeClientError,
    get_runtime_client,
)

__all__ = [
    "Config",
    "load_config",
    "ContainerObservation",
    "ContainerState",
    "ContainerSummary",
    "EntryState",
    "HealthStatus",
    "InspectResult",
    "MonitorEntry",
    "Transition",
    "TransitionKind",
    "CONTAINER_LABEL",
    "RuntimeClient",
    "RuntimeClientError",
    "get_runtime_client",
]
