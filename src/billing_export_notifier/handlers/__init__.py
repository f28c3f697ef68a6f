"""Cloud Function handlers for Billing Export Notifier."""
