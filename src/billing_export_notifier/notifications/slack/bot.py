"""Slack Bot API client for sending messages."""

from __future__ import annotations

from typing import Any

import requests


class SlackAPIError(Exception):
    """Error returned by, or while calling, the Slack Web API."""

    pass


class SlackBotClient:
    """
    Client for posting messages via the Slack Bot API.

    The bot must be a member of the target channel and hold the
    `chat:write` scope.
    """

    BASE_URL = "https://slack.com/api"

    def __init__(self, bot_token: str, timeout: float = 10):
        """
        Initialize the Slack Bot client.

        Args:
            bot_token: Slack Bot User OAuth Token (xoxb-...).
            timeout: Request timeout in seconds.
        """
        self.bot_token = bot_token
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {bot_token}",
            "Content-Type": "application/json; charset=utf-8",
        })

    def send_message(self, channel: str, text: str) -> dict[str, Any]:
        """
        Send a plain text message to a channel.

        Args:
            channel: Channel ID (C...).
            text: Message text. Not parsed for mrkdwn links or mentions.

        Returns:
            Slack API response dict with 'ok', 'ts', etc.

        Raises:
            SlackAPIError: If the message was not posted.
        """
        payload: dict[str, Any] = {
            "channel": channel,
            "text": text,
            "mrkdwn": False,
        }
        return self._post("chat.postMessage", payload)

    def _post(self, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Make a POST request to the Slack API.

        Args:
            method: Slack API method (e.g., 'chat.postMessage').
            payload: Request payload.

        Returns:
            Response JSON.

        Raises:
            SlackAPIError: On network errors, HTTP errors or an `ok: false` reply.
        """
        url = f"{self.BASE_URL}/{method}"

        try:
            response = self._session.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise SlackAPIError(f"Slack API request failed ({method}): {e}") from e
        except ValueError as e:
            raise SlackAPIError(f"Slack API returned invalid JSON ({method}): {e}") from e

        if not data.get("ok"):
            error = data.get("error", "unknown_error")
            raise SlackAPIError(f"Slack API error ({method}): {error}")

        return data
