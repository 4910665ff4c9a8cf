"""Unit tests for notification transports and dispatch."""

import logging
from unittest.mock import MagicMock, patch

import pytest
import requests

from containermon.core.config import Config
from containermon.core.models import Transition, TransitionKind
from containermon.notify.base import NotificationError, get_notifier
from containermon.notify.dispatcher import NotificationDispatcher, split_destinations
from containermon.notify.local import FileNotifier, LoggerNotifier
from containermon.notify.webhook import DiscordNotifier, SlackNotifier, WebhookNotifier


class TestGetNotifier:
    """Tests for the notifier factory."""

    def test_http_schemes(self):
        """Test http and https map to the webhook notifier."""
        assert isinstance(get_notifier("http://host/hook"), WebhookNotifier)
        assert isinstance(get_notifier("https://host/hook"), WebhookNotifier)

    def test_named_services(self):
        """Test service schemes."""
        assert isinstance(get_notifier("slack://a/b/c"), SlackNotifier)
        assert isinstance(get_notifier("discord://tok@123"), DiscordNotifier)
        assert isinstance(get_notifier("file:///tmp/alerts.log"), FileNotifier)
        assert isinstance(get_notifier("logger://"), LoggerNotifier)

    def test_timeout_passed(self):
        """Test timeout reaches the notifier."""
        assert get_notifier("https://host/hook", timeout=3.0).timeout == 3.0

    def test_unsupported_scheme(self):
        """Test unknown services are rejected."""
        with pytest.raises(ValueError):
            get_notifier("pigeon://coop")

    def test_missing_scheme(self):
        """Test a bare string is rejected."""
        with pytest.raises(ValueError):
            get_notifier("not-a-url")


class TestWebhookNotifiers:
    """Tests for HTTP notifiers."""

    @patch("containermon.notify.webhook.requests.post")
    def test_generic_webhook(self, mock_post):
        """Test generic webhook payload."""
        get_notifier("https://example.com/hook", timeout=4.0).send("hello")

        mock_post.assert_called_once_with(
            "https://example.com/hook", json={"message": "hello"}, timeout=4.0
        )
        mock_post.return_value.raise_for_status.assert_called_once()

    @patch("containermon.notify.webhook.requests.post")
    def test_slack(self, mock_post):
        """Test Slack URL mapping keeps token case."""
        get_notifier("slack://monbot@T0ABC/B0DEF/XyZ123").send("hi")

        args, kwargs = mock_post.call_args
        assert args[0] == "https://hooks.slack.com/services/T0ABC/B0DEF/XyZ123"
        assert kwargs["json"] == {"text": "hi", "username": "monbot"}

    def test_slack_bad_url(self):
        """Test Slack URL needs three tokens."""
        with pytest.raises(ValueError):
            SlackNotifier("slack://only/two")

    @patch("containermon.notify.webhook.requests.post")
    def test_discord(self, mock_post):
        """Test Discord URL mapping."""
        get_notifier("discord://s3cret@123456").send("hi")

        args, kwargs = mock_post.call_args
        assert args[0] == "https://discord.com/api/webhooks/123456/s3cret"
        assert kwargs["json"] == {"content": "hi"}

    def test_discord_bad_url(self):
        """Test Discord URL needs a token."""
        with pytest.raises(ValueError):
            DiscordNotifier("discord://123456")

    @patch("containermon.notify.webhook.requests.post")
    def test_http_error(self, mock_post):
        """Test HTTP errors become NotificationError."""
        mock_post.return_value.raise_for_status.side_effect = requests.HTTPError("500")

        with pytest.raises(NotificationError):
            get_notifier("https://example.com/hook").send("hello")

    @patch("containermon.notify.webhook.requests.post")
    def test_connection_error(self, mock_post):
        """Test connection errors become NotificationError."""
        mock_post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(NotificationError):
            get_notifier("https://example.com/hook").send("hello")


class TestLocalNotifiers:
    """Tests for file and logger notifiers."""

    def test_file_notifier(self, tmp_path):
        """Test messages are appended to the file."""
        path = tmp_path / "nested" / "alerts.log"
        notifier = get_notifier(f"file://{path}")

        notifier.send("first")
        notifier.send("second")

        lines = path.read_text().splitlines()
        assert len(lines) == 2
        assert lines[0].endswith("| first")
        assert lines[1].endswith("| second")

    def test_file_notifier_write_error(self, tmp_path):
        """Test write failures become NotificationError."""
        notifier = FileNotifier(f"file://{tmp_path}")

        with pytest.raises(NotificationError):
            notifier.send("cannot write to a directory")

    def test_logger_notifier(self, caplog):
        """Test logger notifier writes a warning."""
        with caplog.at_level(logging.WARNING, logger="containermon.notify.local"):
            LoggerNotifier("logger://").send("container down")

        assert "container down" in caplog.text


class TestSplitDestinations:
    """Tests for destination splitting."""

    def test_split(self):
        """Test separator handling."""
        assert split_destinations("a://x|b://y") == ["a://x", "b://y"]
        assert split_destinations("a://x") == ["a://x"]

    def test_blank(self):
        """Test blanks are dropped."""
        assert split_destinations("") == []
        assert split_destinations("a://x|| ") == ["a://x"]


class TestNotificationDispatcher:
    """Tests for NotificationDispatcher."""

    def _factory(self, notifiers):
        return lambda url, timeout: notifiers[url]

    def test_fan_out_independent(self):
        """Test one failing destination does not block the other."""
        a, b = MagicMock(), MagicMock()
        a.send.side_effect = NotificationError("down")
        dispatcher = NotificationDispatcher(
            failure_url="urlA|urlB",
            notifier_factory=self._factory({"urlA": a, "urlB": b}),
        )

        delivered = dispatcher.send_all("urlA|urlB", "msg")

        assert delivered == 1
        a.send.assert_called_once_with("msg")
        b.send.assert_called_once_with("msg")

    def test_unsupported_destination_logged(self, caplog):
        """Test factory errors are logged, not raised."""
        dispatcher = NotificationDispatcher()

        with caplog.at_level(logging.ERROR):
            assert dispatcher.send("pigeon://coop", "msg") is False

        assert "Error sending notification" in caplog.text

    def test_dispatch_routes_by_kind(self):
        """Test failure and recovery go to different destinations."""
        fail, ok = MagicMock(), MagicMock()
        dispatcher = NotificationDispatcher(
            failure_url="fail",
            recovery_url="ok",
            notifier_factory=self._factory({"fail": fail, "ok": ok}),
        )

        dispatcher.dispatch(Transition("c1", "web", TransitionKind.FAILURE, "p: "))
        dispatcher.dispatch(Transition("c1", "web", TransitionKind.RECOVERY, "p: "))

        fail.send.assert_called_once_with("p: Container web is not healthy")
        ok.send.assert_called_once_with("p: Container web is back to healthy")

    def test_recovery_defaults_to_failure_url(self):
        """Test recovery destination fallback."""
        assert NotificationDispatcher(failure_url="x").recovery_url == "x"

    def test_no_destinations(self):
        """Test dispatch without destinations delivers nothing."""
        dispatcher = NotificationDispatcher()
        transition = Transition("c1", "web", TransitionKind.FAILURE)

        assert dispatcher.dispatch(transition) == 0

    def test_from_config(self):
        """Test dispatcher built from config."""
        config = Config(notification_url="logger://", notification_timeout=2.5)
        dispatcher = NotificationDispatcher.from_config(config)

        assert dispatcher.failure_url == "logger://"
        assert dispatcher.recovery_url == "logger://"
        assert dispatcher.timeout == 2.5

    def test_dispatch_logs_message(self, caplog):
        """Test the message is logged on dispatch."""
        dispatcher = NotificationDispatcher()

        with caplog.at_level(logging.INFO, logger="containermon.notify.dispatcher"):
            dispatcher.dispatch(Transition("c1", "web", TransitionKind.FAILURE))

        assert "Container web is not healthy" in caplog.text
