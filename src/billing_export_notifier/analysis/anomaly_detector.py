"""Anomaly detection for day-over-day GCP costs."""

from billing_export_notifier.config.schema import AnomalyDetectionConfig
from billing_export_notifier.warehouse.base import CostRecord


class AnomalyDetector:
    """
    Flag services whose cost grew faster than a fixed percentage.

    A record is anomalous when its change rate is known and strictly
    greater than the configured threshold. Records without a change rate
    (a missing day or a zero-cost previous day) are never flagged.
    """

    def __init__(self, config: AnomalyDetectionConfig):
        """
        Initialize the anomaly detector.

        Args:
            config: Anomaly detection configuration.
        """
        self.config = config

    @property
    def threshold(self) -> float:
        return self.config.threshold_percentage

    def is_anomalous(self, record: CostRecord) -> bool:
        return record.change_rate is not None and record.change_rate > self.threshold

    def detect(self, records: list[CostRecord]) -> list[CostRecord]:
        """
        Select the anomalous records.

        Args:
            records: Materialized cost records.

        Returns:
            Anomalous records in input order.
        """
        return [record for record in records if self.is_anomalous(record)]

    def get_anomaly_summary(self, anomalies: list[CostRecord]) -> str:
        """Generate a summary of detected anomalies."""
        if not anomalies:
            return f"No anomalies detected above {self.threshold:.2f}%."

        projects = {a.project for a in anomalies}
        highest = max(anomalies, key=lambda a: a.change_rate)
        return (
            f"Detected {len(anomalies)} anomalies above {self.threshold:.2f}% "
            f"across {len(projects)} projects "
            f"(highest: {highest.service} in {highest.project} at {highest.change_rate:+.2f}%)"
        )
