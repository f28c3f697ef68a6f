"""
Billing Export Notifier - day-over-day GCP cost anomaly alerts in Slack.

A small Cloud Function that:
- Defines a per-day aggregation table function over the BigQuery billing export
- Compares yesterday's spend with the day before per project and service
- Flags services whose change rate exceeds a configured percentage
- Posts one Slack message per flagged service
"""

__version__ = "0.1.0"
