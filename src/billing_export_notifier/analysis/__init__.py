"""Cost aggregation, change rate and anomaly detection for Billing Export Notifier."""

from billing_export_notifier.analysis.anomaly_detector import AnomalyDetector
from billing_export_notifier.analysis.change_rate import materialize, query_change_rate
from billing_export_notifier.analysis.partition_table import create_partition_table

__all__ = [
    "AnomalyDetector",
    "create_partition_table",
    "query_change_rate",
    "materialize",
]
