"""
HTTP webhook notifiers.

Posts notifications to generic JSON webhooks, Slack and Discord.
"""

from typing import Any
from urllib.parse import urlsplit

import requests

from containermon.notify.base import NotificationError, Notifier

SLACK_WEBHOOK_BASE = "https://hooks.slack.com/services"
DISCORD_WEBHOOK_BASE = "https://discord.com/api/webhooks"


class WebhookNotifier(Notifier):
    """
    Notifier for generic HTTP(S) webhooks.

    Sends ``{"message": "<text>"}`` as a JSON POST to the URL as given.
    """

    def endpoint(self) -> str:
        """Get the URL to POST to."""
        return self.url

    def payload(self, message: str) -> dict[str, Any]:
        """Build the JSON body for a message."""
        return {"message": message}

    def send(self, message: str) -> None:
        """Post message to the webhook."""
        try:
            response = requests.post(
                self.endpoint(),
                json=self.payload(message),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise NotificationError(f"{self.service} delivery failed: {e}") from e


class SlackNotifier(WebhookNotifier):
    """
    Notifier for Slack incoming webhooks.

    URL format: slack://[botname@]token-a/token-b/token-c, which maps to
    https://hooks.slack.com/services/token-a/token-b/token-c
    """

    def __init__(self, url: str, timeout: float = 10.0):
        super().__init__(url, timeout)
        parts = urlsplit(url)
        tokens = [parts.hostname or ""] + [p for p in parts.path.split("/") if p]
        if len(tokens) != 3 or not all(tokens):
            raise ValueError("Slack URL must be slack://[botname@]token-a/token-b/token-c")
        # hostname is lowercased by urlsplit, so take the raw netloc
        tokens[0] = parts.netloc.rsplit("@", 1)[-1]
        self.tokens = tokens
        self.botname = parts.username

    def endpoint(self) -> str:
        return f"{SLACK_WEBHOOK_BASE}/{'/'.join(self.tokens)}"

    def payload(self, message: str) -> dict[str, Any]:
        data: dict[str, Any] = {"text": message}
        if self.botname:
            data["username"] = self.botname
        return data


class DiscordNotifier(WebhookNotifier):
    """
    Notifier for Discord webhooks.

    URL format: discord://token@webhook-id, which maps to
    https://discord.com/api/webhooks/webhook-id/token
    """

    def __init__(self, url: str, timeout: float = 10.0):
        super().__init__(url, timeout)
        parts = urlsplit(url)
        if not parts.username or not parts.hostname:
            raise ValueError("Discord URL must be discord://token@webhook-id")
        self.token = parts.username
        self.webhook_id = parts.netloc.rsplit("@", 1)[-1]

    def endpoint(self) -> str:
        return f"{DISCORD_WEBHOOK_BASE}/{self.webhook_id}/{self.token}"

    def payload(self, message: str) -> dict[str, Any]:
        return {"content": message}
