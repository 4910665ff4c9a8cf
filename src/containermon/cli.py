"""
Command-line interface for container monitor.

Provides commands for running the monitor daemon, one-off checks, and
checking configuration and notification delivery.
"""

import logging
import sys
from pathlib import Path

import click

from containermon import __version__
from containermon.core.config import Config, load_config, save_config
from containermon.core.runtime import RuntimeClientError, get_runtime_client
from containermon.health.daemon import MonitorDaemon, format_check_table
from containermon.notify.dispatcher import NotificationDispatcher, split_destinations

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _get_daemon(ctx: click.Context) -> MonitorDaemon:
    """Get or create monitor daemon from context."""
    if "daemon" not in ctx.obj:
        config: Config = ctx.obj["config"]
        try:
            runtime = get_runtime_client(timeout=config.docker_timeout)
        except RuntimeClientError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
        ctx.obj["daemon"] = MonitorDaemon(
            runtime=runtime,
            dispatcher=NotificationDispatcher.from_config(config),
            config=config,
        )
    return ctx.obj["daemon"]


def _setup_logging(level_name: str, verbose: bool) -> None:
    """Configure root logging once for the process."""
    level = logging.DEBUG if verbose else getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)


@click.group()
@click.version_option(version=__version__, prog_name="containermon")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "-c", "--config", "config_path", type=click.Path(exists=True, path_type=Path),
    help="Path to YAML config file"
)
@click.option("--fail-limit", type=int, help="Consecutive unhealthy checks before notification")
@click.option("--cron", "cron_schedule", help="Cron schedule for health checks")
@click.option("--notification-url", help="Notification URL(s), separated by '|'")
@click.option("--healthy-notification-url", help="Notification URL(s) for recoveries")
@click.option(
    "--use-labels/--no-use-labels", default=None,
    help="Monitor only containers labelled containermon.enable=true"
)
@click.option(
    "--notify-healthy/--no-notify-healthy", default=None,
    help="Notify when an unhealthy container is healthy again"
)
@click.option(
    "--check-stopped/--no-check-stopped", default=None,
    help="Include stopped containers (they count as unhealthy)"
)
@click.option("--message-prefix", help="Prefix for notification messages")
@click.option(
    "--check-exit-code/--no-check-exit-code", default=None,
    help="Judge stopped containers by their exit code"
)
@click.option("--docker-timeout", type=int, help="Docker API timeout in seconds")
@click.option("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)")
@click.pass_context
def main(
    ctx: click.Context,
    verbose: bool,
    config_path: Path | None,
    **overrides,
) -> None:
    """Container Monitor - Notify when Docker containers become unhealthy."""
    ctx.ensure_object(dict)
    config = load_config(config_path).with_overrides(**overrides)
    _setup_logging(config.log_level, verbose)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config


@main.command("run")
@click.option("--run-now", is_flag=True, help="Run a check immediately on startup")
@click.option("--status-port", type=int, help="Serve the status API on this port")
@click.option("--status-host", default="0.0.0.0", help="Address for the status API")
@click.pass_context
def run_cmd(
    ctx: click.Context,
    run_now: bool,
    status_port: int | None,
    status_host: str,
) -> None:
    """Run the monitor on its cron schedule until interrupted."""
    config: Config = ctx.obj["config"]

    click.echo("Starting up Container-Mon")
    click.echo("Using config:")
    for line in config.describe():
        click.echo(f"  - {line}")

    daemon = _get_daemon(ctx)

    if status_port:
        from containermon.web.app import serve_in_background
        serve_in_background(daemon, host=status_host, port=status_port)

    daemon.start(run_now=run_now)


@main.command("check")
@click.option(
    "--notify/--no-notify", default=False,
    help="Send notifications for transitions found by this check"
)
@click.pass_context
def check_cmd(ctx: click.Context, notify: bool) -> None:
    """Run a single check and show container health."""
    daemon = _get_daemon(ctx)

    try:
        results = daemon.run_once(notify=notify)
    except RuntimeClientError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(format_check_table(results))

    if ctx.obj.get("verbose"):
        unhealthy = sum(1 for r in results if not r.healthy)
        click.echo(f"\n{len(results)} container(s) checked, {unhealthy} unhealthy")


@main.command("show-config")
@click.option(
    "--save", "save_path", type=click.Path(dir_okay=False, path_type=Path),
    help="Also write the effective configuration to this YAML file"
)
@click.pass_context
def show_config_cmd(ctx: click.Context, save_path: Path | None) -> None:
    """Show the effective configuration."""
    config: Config = ctx.obj["config"]

    click.echo("Using config:")
    for line in config.describe():
        click.echo(f"  - {line}")

    if save_path:
        save_config(config, save_path)
        click.echo(f"\nSaved configuration to {save_path}")


@main.command("test-notify")
@click.option("--healthy", is_flag=True, help="Use the recovery notification URL(s)")
@click.option("--message", "-m", default="Test notification", help="Message to send")
@click.pass_context
def test_notify_cmd(ctx: click.Context, healthy: bool, message: str) -> None:
    """Send a test message to the configured notification URL(s)."""
    config: Config = ctx.obj["config"]
    urls = config.recovery_notification_url if healthy else config.notification_url

    destinations = split_destinations(urls)
    if not destinations:
        click.echo("Error: No notification URL configured", err=True)
        sys.exit(1)

    dispatcher = NotificationDispatcher.from_config(config)
    delivered = dispatcher.send_all(urls, f"{config.message_prefix}{message}")

    click.echo(f"Delivered to {delivered}/{len(destinations)} destination(s)")
    if delivered < len(destinations):
        sys.exit(1)


if __name__ == "__main__":
    main()
