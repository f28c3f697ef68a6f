"""Slack notification integration."""

from billing_export_notifier.notifications.slack.bot import SlackAPIError, SlackBotClient
from billing_export_notifier.notifications.slack.formatter import SlackFormatter
from billing_export_notifier.notifications.slack.notifier import NotificationError, SlackNotifier

__all__ = [
    "SlackAPIError",
    "SlackBotClient",
    "SlackFormatter",
    "NotificationError",
    "SlackNotifier",
]
