"""Integration tests for containermon CLI."""

from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from containermon.cli import main
from containermon.core.models import ContainerObservation, ContainerState, HealthStatus
from containermon.core.runtime import RuntimeClientError
from containermon.health.daemon import ContainerCheck


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove any CONTAINERMON_* variables from the environment."""
    import os

    for key in list(os.environ):
        if key.startswith("CONTAINERMON_"):
            monkeypatch.delenv(key)


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def daemon():
    """Create a mock monitor daemon."""
    mock = MagicMock()
    mock.run_once.return_value = [
        ContainerCheck(
            observation=ContainerObservation(
                id="0123456789abcdef",
                name="web",
                state=ContainerState.RUNNING,
                health_status=HealthStatus.UNHEALTHY,
            ),
            healthy=False,
            counter=1,
        )
    ]
    return mock


class TestMainCommand:
    """Tests for the main containermon command."""

    def test_version(self, runner):
        """Test --version flag."""
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "containermon" in result.output
        assert "0.1.0" in result.output

    def test_help(self, runner):
        """Test --help flag."""
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Container Monitor" in result.output
        assert "run" in result.output
        assert "check" in result.output


class TestShowConfigCommand:
    """Tests for the show-config command."""

    def test_defaults(self, runner):
        """Test default configuration output."""
        result = runner.invoke(main, ["show-config"])
        assert result.exit_code == 0
        assert "failure limit: 1" in result.output
        assert "cron schedule: */5 * * * *" in result.output

    def test_flag_overrides_env(self, runner, monkeypatch):
        """Test command-line flags win over environment variables."""
        monkeypatch.setenv("CONTAINERMON_FAIL_LIMIT", "4")
        monkeypatch.setenv("CONTAINERMON_USE_LABELS", "true")

        result = runner.invoke(main, ["--fail-limit", "2", "show-config"])

        assert "failure limit: 2" in result.output
        assert "use labels: True" in result.output

    def test_negative_flag(self, runner, monkeypatch):
        """Test --no- flags override a true environment value."""
        monkeypatch.setenv("CONTAINERMON_NOTIFY_HEALTHY", "true")

        result = runner.invoke(main, ["--no-notify-healthy", "show-config"])

        assert "notify when healthy: False" in result.output

    def test_hides_url_secrets(self, runner):
        """Test notification URLs are reduced to their scheme."""
        result = runner.invoke(
            main, ["--notification-url", "discord://secret@123", "show-config"]
        )

        assert "notification service: discord" in result.output
        assert "secret" not in result.output

    def test_save(self, runner, tmp_path):
        """Test writing the effective config to a file."""
        path = tmp_path / "containermon.yaml"

        result = runner.invoke(main, ["--fail-limit", "6", "show-config", "--save", str(path)])

        assert result.exit_code == 0
        assert "fail_limit: 6" in path.read_text()

    def test_config_file(self, runner, tmp_path):
        """Test loading options from --config."""
        path = tmp_path / "config.yaml"
        path.write_text("fail_limit: 9\n")

        result = runner.invoke(main, ["--config", str(path), "show-config"])

        assert "failure limit: 9" in result.output


class TestCheckCommand:
    """Tests for the check command."""

    def test_check_prints_table(self, runner, daemon):
        """Test check shows each container."""
        result = runner.invoke(main, ["check"], obj={"daemon": daemon})

        assert result.exit_code == 0
        assert "web" in result.output
        assert "unhealthy" in result.output
        daemon.run_once.assert_called_once_with(notify=False)

    def test_check_notify(self, runner, daemon):
        """Test --notify dispatches transitions."""
        runner.invoke(main, ["check", "--notify"], obj={"daemon": daemon})
        daemon.run_once.assert_called_once_with(notify=True)

    def test_check_verbose_summary(self, runner, daemon):
        """Test verbose output includes a summary."""
        result = runner.invoke(main, ["-v", "check"], obj={"daemon": daemon})
        assert "1 container(s) checked, 1 unhealthy" in result.output

    def test_check_list_failure(self, runner, daemon):
        """Test runtime errors exit non-zero."""
        daemon.run_once.side_effect = RuntimeClientError("cannot connect")

        result = runner.invoke(main, ["check"], obj={"daemon": daemon})

        assert result.exit_code == 1
        assert "cannot connect" in result.output

    @patch("containermon.cli.get_runtime_client")
    def test_check_no_docker(self, mock_get_client, runner):
        """Test missing Docker daemon exits non-zero."""
        mock_get_client.side_effect = RuntimeClientError("Error getting Docker client")

        result = runner.invoke(main, ["check"])

        assert result.exit_code == 1
        assert "Error getting Docker client" in result.output

    @patch("containermon.cli.get_runtime_client")
    def test_check_builds_daemon_from_config(self, mock_get_client, runner):
        """Test the daemon is built with the configured Docker timeout."""
        mock_get_client.return_value.list_containers.return_value = []

        result = runner.invoke(main, ["--docker-timeout", "7", "check"])

        assert result.exit_code == 0
        mock_get_client.assert_called_once_with(timeout=7)
        assert "No containers to check." in result.output


class TestRunCommand:
    """Tests for the run command."""

    def test_run_starts_daemon(self, runner, daemon):
        """Test run prints config and starts the daemon."""
        result = runner.invoke(main, ["run", "--run-now"], obj={"daemon": daemon})

        assert result.exit_code == 0
        assert "Starting up Container-Mon" in result.output
        assert "Using config:" in result.output
        daemon.start.assert_called_once_with(run_now=True)

    @patch("containermon.web.app.serve_in_background")
    def test_run_with_status_port(self, mock_serve, runner, daemon):
        """Test --status-port starts the status API."""
        result = runner.invoke(main, ["run", "--status-port", "8099"], obj={"daemon": daemon})

        assert result.exit_code == 0
        mock_serve.assert_called_once_with(daemon, host="0.0.0.0", port=8099)


class TestTestNotifyCommand:
    """Tests for the test-notify command."""

    def test_no_url(self, runner):
        """Test error when no destination is configured."""
        result = runner.invoke(main, ["test-notify"])
        assert result.exit_code == 1
        assert "No notification URL configured" in result.output

    def test_file_destination(self, runner, tmp_path):
        """Test delivery to a file destination."""
        path = tmp_path / "alerts.log"

        result = runner.invoke(
            main,
            ["--notification-url", f"file://{path}", "--message-prefix", "lab: ", "test-notify"],
        )

        assert result.exit_code == 0
        assert "Delivered to 1/1 destination(s)" in result.output
        assert "lab: Test notification" in path.read_text()

    def test_partial_failure(self, runner, tmp_path):
        """Test a failing destination is reported and others still receive."""
        path = tmp_path / "alerts.log"

        result = runner.invoke(
            main,
            ["--notification-url", f"pigeon://coop|file://{path}", "test-notify"],
        )

        assert result.exit_code == 1
        assert "Delivered to 1/2 destination(s)" in result.output
        assert path.exists()

    def test_healthy_destination(self, runner, tmp_path):
        """Test --healthy uses the recovery destination."""
        fail_path = tmp_path / "fail.log"
        ok_path = tmp_path / "ok.log"

        runner.invoke(
            main,
            [
                "--notification-url", f"file://{fail_path}",
                "--healthy-notification-url", f"file://{ok_path}",
                "test-notify", "--healthy", "-m", "recovered",
            ],
        )

        assert ok_path.read_text().strip().endswith("| recovered")
        assert not fail_path.exists()
