"""
Docker runtime client for container monitor.

Wraps the Docker SDK's low-level API with the two calls the monitor needs:
listing containers and inspecting a single container.
"""

import logging
from typing import Any, Optional

import docker
from docker.errors import DockerException
from requests.exceptions import RequestException

from containermon.core.models import (
    ContainerObservation,
    ContainerState,
    ContainerSummary,
    HealthStatus,
    InspectResult,
)

logger = logging.getLogger(__name__)

# Label that opts a container into monitoring when label filtering is on
CONTAINER_LABEL = "containermon.enable"


class RuntimeClientError(Exception):
    """Raised when the container runtime cannot be reached or queried."""


class RuntimeClient:
    """Thin adapter over a Docker client."""

    def __init__(self, client: docker.DockerClient):
        """
        Initialize runtime client.

        Args:
            client: Docker SDK client
        """
        self.client = client

    def list_containers(
        self,
        filter_by_label: bool = False,
        include_stopped: bool = False,
    ) -> list[ContainerSummary]:
        """
        List containers known to the runtime.

        Args:
            filter_by_label: Only include containers labelled
                ``containermon.enable=true``
            include_stopped: Include stopped containers as well as running ones

        Returns:
            List of container summaries

        Raises:
            RuntimeClientError: If the runtime cannot be queried
        """
        filters = {}
        if filter_by_label:
            filters["label"] = f"{CONTAINER_LABEL}=true"

        try:
            items = self.client.api.containers(all=include_stopped, filters=filters)
        except (DockerException, RequestException, ValueError) as e:
            raise RuntimeClientError(f"Failed to list containers: {e}") from e

        return [_summary_from_api(item) for item in items]

    def inspect(self, container_id: str) -> InspectResult:
        """
        Inspect a single container.

        Args:
            container_id: Container ID

        Returns:
            InspectResult with coarse state, health status and exit code

        Raises:
            RuntimeClientError: If the container cannot be inspected
        """
        try:
            data = self.client.api.inspect_container(container_id)
        except (DockerException, RequestException, ValueError) as e:
            raise RuntimeClientError(
                f"Failed to inspect container {container_id[:12]}: {e}"
            ) from e

        state = data.get("State") or {}
        health = state.get("Health") or {}
        exit_code = state.get("ExitCode")

        return InspectResult(
            state=ContainerState.parse(state.get("Status")),
            health_status=HealthStatus.parse(health.get("Status")),
            exit_code=exit_code if isinstance(exit_code, int) else None,
        )

    def observe(self, summary: ContainerSummary) -> ContainerObservation:
        """
        Build an observation for a listed container.

        The coarse state always comes from the list call. An inspection
        failure is not raised; the observation is marked as not inspected.
        """
        try:
            result = self.inspect(summary.id)
        except Exception as e:
            logger.warning(f"Inspect failed for {summary.name}: {e}")
            return ContainerObservation(
                id=summary.id,
                name=summary.name,
                state=summary.state,
                inspected=False,
            )

        return ContainerObservation(
            id=summary.id,
            name=summary.name,
            state=summary.state,
            health_status=result.health_status,
            exit_code=result.exit_code,
        )

    def close(self) -> None:
        """Close the underlying Docker client."""
        self.client.close()


def _summary_from_api(item: dict[str, Any]) -> ContainerSummary:
    """Convert a container list entry from the Docker API."""
    container_id = item.get("Id", "")
    names = item.get("Names") or []
    # Docker reports names with a leading slash
    name = names[0].lstrip("/") if names else container_id[:12]

    return ContainerSummary(
        id=container_id,
        name=name,
        state=ContainerState.parse(item.get("State")),
        labels=item.get("Labels") or {},
    )


def get_runtime_client(timeout: Optional[int] = None) -> RuntimeClient:
    """
    Create a runtime client from the environment (DOCKER_HOST etc.).

    Args:
        timeout: Per-request timeout in seconds

    Returns:
        RuntimeClient instance

    Raises:
        RuntimeClientError: If no Docker client can be created
    """
    kwargs = {}
    if timeout is not None:
        kwargs["timeout"] = timeout

    try:
        client = docker.from_env(**kwargs)
    except DockerException as e:
        raise RuntimeClientError(f"Error getting Docker client: {e}") from e

    return RuntimeClient(client)
