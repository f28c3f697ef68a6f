"""Deliver anomaly notifications to a single Slack channel."""

from __future__ import annotations

from billing_export_notifier.config.schema import SlackConfig
from billing_export_notifier.notifications.slack.bot import SlackAPIError, SlackBotClient
from billing_export_notifier.notifications.slack.formatter import SlackFormatter
from billing_export_notifier.warehouse.base import CostRecord


class NotificationError(Exception):
    """Notifier misconfiguration or a failed delivery."""

    def __init__(self, message: str, record: CostRecord | None = None):
        super().__init__(message)
        self.record = record


class SlackNotifier:
    """
    Post one message per anomalous record to a Slack channel.

    Messages are sent one at a time in order. The first failure stops the
    run: records already posted stay posted and the rest are not attempted.
    """

    def __init__(
        self,
        channel_id: str,
        oauth_token: str,
        client: SlackBotClient | None = None,
        formatter: SlackFormatter | None = None,
    ):
        """
        Initialize the notifier.

        Args:
            channel_id: Slack channel ID to post to.
            oauth_token: Slack Bot User OAuth Token.
            client: Optional pre-built Slack client.
            formatter: Optional message formatter.
        """
        self.channel_id = channel_id
        self.oauth_token = oauth_token
        self._client = client
        self.formatter = formatter or SlackFormatter()

    @classmethod
    def from_config(cls, config: SlackConfig) -> SlackNotifier:
        return cls(channel_id=config.channel_id, oauth_token=config.oauth_token)

    @property
    def client(self) -> SlackBotClient:
        """Get or create the Slack client."""
        if self._client is None:
            self._client = SlackBotClient(self.oauth_token)
        return self._client

    def validate(self) -> None:
        """
        Check the channel and credential are set.

        Raises:
            NotificationError: If either is empty.
        """
        if not self.channel_id:
            raise NotificationError("slack channel id is empty")
        if not self.oauth_token:
            raise NotificationError("slack oauth token is empty")

    def notify(self, anomalies: list[CostRecord]) -> int:
        """
        Send a message for each anomalous record.

        Args:
            anomalies: Anomalous records, in the order to send them.

        Returns:
            Number of messages sent.

        Raises:
            NotificationError: If validation fails or a message cannot be sent.
        """
        self.validate()

        sent = 0
        for record in anomalies:
            text = self.formatter.format_anomaly_message(record)
            try:
                self.client.send_message(self.channel_id, text)
            except SlackAPIError as e:
                raise NotificationError(
                    f"failed to notify {record.service} in {record.project} "
                    f"after {sent} of {len(anomalies)} messages: {e}",
                    record=record,
                ) from e
            sent += 1
        return sent
