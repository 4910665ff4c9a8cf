"""
Configuration management for container monitor.

Loads configuration from an optional YAML file, then applies environment
variable overrides and finally command-line flag overrides.
"""

import logging
import math
import os
import re
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml
from croniter import croniter

logger = logging.getLogger(__name__)

DEFAULT_CRON_SCHEDULE = "*/5 * * * *"
DEFAULT_FAIL_LIMIT = 1
DEFAULT_DOCKER_TIMEOUT = 30
DEFAULT_NOTIFICATION_TIMEOUT = 10.0

# Environment variables
ENV_CONFIG = "CONTAINERMON_CONFIG"
ENV_FAIL_LIMIT = "CONTAINERMON_FAIL_LIMIT"
ENV_CRON_SCHEDULE = "CONTAINERMON_CRON"
ENV_NOTIFICATION_URL = "CONTAINERMON_NOTIFICATION_URL"
ENV_HEALTHY_NOTIFICATION_URL = "CONTAINERMON_HEALTHY_NOTIFICATION_URL"
ENV_USE_LABELS = "CONTAINERMON_USE_LABELS"
ENV_NOTIFY_HEALTHY = "CONTAINERMON_NOTIFY_HEALTHY"
ENV_CHECK_STOPPED = "CONTAINERMON_CHECK_STOPPED"
ENV_MESSAGE_PREFIX = "CONTAINERMON_MESSAGE_PREFIX"
ENV_CHECK_EXIT_CODE = "CONTAINERMON_CHECK_EXIT_CODE"
ENV_DOCKER_TIMEOUT = "CONTAINERMON_DOCKER_TIMEOUT"
ENV_NOTIFICATION_TIMEOUT = "CONTAINERMON_NOTIFICATION_TIMEOUT"
ENV_LOG_LEVEL = "CONTAINERMON_LOG_LEVEL"

_TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_VALUES = {"0", "f", "F", "FALSE", "false", "False"}
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_bool(value: Any, fallback: bool) -> bool:
    """Parse a boolean option, returning fallback if it is malformed."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
    return fallback


def parse_int(value: Any, fallback: int, positive: bool = False) -> int:
    """
    Parse an integer option, returning fallback if it is malformed.

    Strings must be plain decimal digits with an optional sign. With
    positive set, values of 0 or less count as malformed.
    """
    if isinstance(value, bool):
        return fallback
    if isinstance(value, int):
        result = value
    elif isinstance(value, str) and _INT_PATTERN.fullmatch(value):
        result = int(value)
    else:
        return fallback
    if positive and result <= 0:
        return fallback
    return result


def parse_float(value: Any, fallback: float, positive: bool = False) -> float:
    """Parse a float option, returning fallback if it is malformed."""
    if isinstance(value, bool):
        return fallback
    if isinstance(value, str) and (value != value.strip() or "_" in value):
        return fallback
    try:
        result = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(result) or (positive and result <= 0):
        return fallback
    return result


def validate_cron(expression: str) -> str:
    """Return the expression if it is a valid cron schedule, else the default."""
    if croniter.is_valid(expression):
        return expression
    logger.warning(
        f"Invalid cron schedule '{expression}', using '{DEFAULT_CRON_SCHEDULE}'"
    )
    return DEFAULT_CRON_SCHEDULE


def notification_service(url: str) -> str:
    """Reduce notification URL(s) to their schemes for display."""
    if not url:
        return ""
    return "|".join(part.split("://")[0] for part in url.split("|"))


@dataclass
class Config:
    """Main configuration for container monitor."""

    fail_limit: int = DEFAULT_FAIL_LIMIT
    cron_schedule: str = DEFAULT_CRON_SCHEDULE
    notification_url: str = ""
    healthy_notification_url: str = ""
    use_labels: bool = False
    notify_healthy: bool = True
    check_stopped: bool = True
    message_prefix: str = ""
    check_exit_code: bool = False
    docker_timeout: int = DEFAULT_DOCKER_TIMEOUT
    notification_timeout: float = DEFAULT_NOTIFICATION_TIMEOUT
    log_level: str = "INFO"

    @property
    def recovery_notification_url(self) -> str:
        """Destination(s) for recovery notifications."""
        return self.healthy_notification_url or self.notification_url

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create Config from dictionary, ignoring malformed values."""
        defaults = cls()
        return cls(
            fail_limit=parse_int(data.get("fail_limit"), defaults.fail_limit),
            cron_schedule=validate_cron(
                str(data.get("cron_schedule") or defaults.cron_schedule).strip()
            ),
            notification_url=str(data.get("notification_url") or "").strip(),
            healthy_notification_url=str(
                data.get("healthy_notification_url") or ""
            ).strip(),
            use_labels=parse_bool(data.get("use_labels"), defaults.use_labels),
            notify_healthy=parse_bool(
                data.get("notify_healthy"), defaults.notify_healthy
            ),
            check_stopped=parse_bool(data.get("check_stopped"), defaults.check_stopped),
            message_prefix=str(data.get("message_prefix") or ""),
            check_exit_code=parse_bool(
                data.get("check_exit_code"), defaults.check_exit_code
            ),
            docker_timeout=parse_int(
                data.get("docker_timeout"), defaults.docker_timeout, positive=True
            ),
            notification_timeout=parse_float(
                data.get("notification_timeout"), defaults.notification_timeout, positive=True
            ),
            log_level=str(data.get("log_level") or defaults.log_level).upper(),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert Config to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def with_overrides(self, **overrides: Any) -> "Config":
        """
        Return a copy with command-line overrides applied.

        Overrides whose value is None were not given and are skipped.
        """
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "cron_schedule" in changes:
            changes["cron_schedule"] = validate_cron(changes["cron_schedule"].strip())
        for key in ("notification_url", "healthy_notification_url"):
            if key in changes:
                changes[key] = changes[key].strip()
        if "log_level" in changes:
            changes["log_level"] = changes["log_level"].upper()
        if "docker_timeout" in changes:
            changes["docker_timeout"] = parse_int(
                changes["docker_timeout"], self.docker_timeout, positive=True
            )
        if "notification_timeout" in changes:
            changes["notification_timeout"] = parse_float(
                changes["notification_timeout"], self.notification_timeout, positive=True
            )
        return replace(self, **changes)

    def describe(self) -> list[str]:
        """Describe the configuration without exposing notification secrets."""
        return [
            f"failure limit: {self.fail_limit}",
            f"cron schedule: {self.cron_schedule}",
            f"notification service: {notification_service(self.notification_url)}",
            "healthy notification service: "
            f"{notification_service(self.recovery_notification_url)}",
            f"use labels: {self.use_labels}",
            f"notify when healthy: {self.notify_healthy}",
            f"check stopped containers: {self.check_stopped}",
            f"message prefix: {self.message_prefix}",
            f"check container exit code: {self.check_exit_code}",
        ]


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration.

    Search order for the optional YAML file:
    1. Explicit path if provided
    2. CONTAINERMON_CONFIG environment variable

    Without a file, defaults are used. Environment variables are then
    applied on top:
    - CONTAINERMON_FAIL_LIMIT: Override fail_limit
    - CONTAINERMON_CRON: Override cron_schedule
    - CONTAINERMON_NOTIFICATION_URL: Override notification_url
    - CONTAINERMON_HEALTHY_NOTIFICATION_URL: Override healthy_notification_url
    - CONTAINERMON_USE_LABELS: Override use_labels
    - CONTAINERMON_NOTIFY_HEALTHY: Override notify_healthy
    - CONTAINERMON_CHECK_STOPPED: Override check_stopped
    - CONTAINERMON_MESSAGE_PREFIX: Override message_prefix
    - CONTAINERMON_CHECK_EXIT_CODE: Override check_exit_code
    - CONTAINERMON_DOCKER_TIMEOUT: Override docker_timeout
    - CONTAINERMON_NOTIFICATION_TIMEOUT: Override notification_timeout
    - CONTAINERMON_LOG_LEVEL: Override log_level

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Loaded configuration
    """
    if config_path is None and os.environ.get(ENV_CONFIG):
        config_path = Path(os.environ[ENV_CONFIG])

    config_data = {}
    if config_path and config_path.exists():
        try:
            with open(config_path) as f:
                config_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not read config file {config_path}: {e}")
            config_data = {}

    if not isinstance(config_data, dict):
        config_data = {}

    config = Config.from_dict(config_data)

    return _apply_env_overrides(config)


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config."""
    env = os.environ

    if ENV_FAIL_LIMIT in env:
        config.fail_limit = parse_int(env[ENV_FAIL_LIMIT], config.fail_limit)

    if ENV_CRON_SCHEDULE in env:
        config.cron_schedule = validate_cron(env[ENV_CRON_SCHEDULE].strip())

    if ENV_NOTIFICATION_URL in env:
        config.notification_url = env[ENV_NOTIFICATION_URL].strip()

    if ENV_HEALTHY_NOTIFICATION_URL in env:
        config.healthy_notification_url = env[ENV_HEALTHY_NOTIFICATION_URL].strip()

    if ENV_USE_LABELS in env:
        config.use_labels = parse_bool(env[ENV_USE_LABELS], config.use_labels)

    if ENV_NOTIFY_HEALTHY in env:
        config.notify_healthy = parse_bool(env[ENV_NOTIFY_HEALTHY], config.notify_healthy)

    if ENV_CHECK_STOPPED in env:
        config.check_stopped = parse_bool(env[ENV_CHECK_STOPPED], config.check_stopped)

    # Prefix is not stripped
    if ENV_MESSAGE_PREFIX in env:
        config.message_prefix = env[ENV_MESSAGE_PREFIX]

    if ENV_CHECK_EXIT_CODE in env:
        config.check_exit_code = parse_bool(
            env[ENV_CHECK_EXIT_CODE], config.check_exit_code
        )

    if ENV_DOCKER_TIMEOUT in env:
        config.docker_timeout = parse_int(
            env[ENV_DOCKER_TIMEOUT], config.docker_timeout, positive=True
        )

    if ENV_NOTIFICATION_TIMEOUT in env:
        config.notification_timeout = parse_float(
            env[ENV_NOTIFICATION_TIMEOUT], config.notification_timeout, positive=True
        )

    if ENV_LOG_LEVEL in env:
        config.log_level = env[ENV_LOG_LEVEL].strip().upper()

    return config


def save_config(config: Config, path: Path) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration to save
        path: Path to save to
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        f.write("# Container Monitor Configuration\n")
        f.write("# Environment variables and command-line flags override these\n\n")
        yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)


def get_default_config() -> Config:
    """Get default configuration without loading from file or environment."""
    return Config()
