"""
Health classification for observed containers.

Turns a container observation into a single healthy/unhealthy verdict.
"""

from containermon.core.models import ContainerObservation, ContainerState, HealthStatus


def classify(observation: ContainerObservation, check_exit_code: bool = False) -> bool:
    """
    Decide whether a container is healthy.

    Rules, first match wins:
    1. With exit-code checking on, an exited container is healthy only if
       it was inspected and exited with code 0. An exited container that
       could not be inspected is unhealthy.
    2. If inspection failed, the container is healthy if it is running.
    3. Without a health check, or while the check is still starting, the
       container is healthy if it is running.
    4. Otherwise the health-check status must be exactly "healthy".

    Args:
        observation: Container observation for this cycle
        check_exit_code: Treat the exit code of stopped containers as authoritative

    Returns:
        True if the container is healthy
    """
    if check_exit_code and observation.state == ContainerState.EXITED:
        if not observation.inspected:
            return False
        return observation.exit_code == 0

    if not observation.inspected:
        return observation.is_running

    status = observation.health_status
    if status is None or status in (HealthStatus.NONE, HealthStatus.STARTING):
        return observation.is_running

    return status == HealthStatus.HEALTHY
