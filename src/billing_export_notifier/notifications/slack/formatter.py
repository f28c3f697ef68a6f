"""Plain text formatting for cost records."""

from billing_export_notifier.warehouse.base import CostRecord

ROW_FORMAT = "{:<40} | {:<45} | {:<25} | {:<25} | {:<10}"
ANOMALY_PREFIX = "abnormaly service detection -> "


def _amount(value: float | None) -> str:
    # NULL prints as 0.00
    return f"{value or 0.0:.2f}"


class SlackFormatter:
    """Format cost records as single-line text."""

    def format_record(self, record: CostRecord) -> str:
        """Format one record as a padded table line."""
        return ROW_FORMAT.format(
            f"project: {record.project}",
            f"service: {record.service}",
            f"yesterday cost: {_amount(record.yesterday_cost)}",
            f"today cost: {_amount(record.today_cost)}",
            f"change rate: {_amount(record.change_rate)}",
        )

    def format_anomaly_message(self, record: CostRecord) -> str:
        """Format the Slack message for an anomalous record."""
        return ANOMALY_PREFIX + self.format_record(record)

    def format_summary_table(self, records: list[CostRecord]) -> str:
        """Format every record, one per line, for the run log."""
        return "\n".join(self.format_record(record) for record in records)
