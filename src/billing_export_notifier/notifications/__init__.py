"""Notification integrations for Billing Export Notifier."""

from billing_export_notifier.notifications.slack import (
    NotificationError,
    SlackFormatter,
    SlackNotifier,
)

__all__ = [
    "NotificationError",
    "SlackFormatter",
    "SlackNotifier",
]
