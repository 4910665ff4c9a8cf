"""
Health monitoring module for container monitor.

Provides container classification, failure tracking, scheduling, and the
monitoring daemon.
"""

from containermon.health.classifier import classify
from containermon.health.daemon import ContainerCheck, MonitorDaemon, format_check_table
from containermon.health.scheduler import CronScheduler
from containermon.health.state import MonitorStateStore

__all__ = [
    # Classification
    "classify",
    # State
    "MonitorStateStore",
    # Scheduling
    "CronScheduler",
    # Daemon
    "ContainerCheck",
    "MonitorDaemon",
    "format_check_table",
]
