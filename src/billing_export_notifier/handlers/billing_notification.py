"""
Billing Notification Cloud Function.

Triggered over HTTP (typically by Cloud Scheduler once a day) to:
1. Create or replace the daily cost table function over the billing export
2. Query the day-over-day change rate per project and service
3. Detect services above the abnormality threshold
4. Send one Slack message per anomalous service
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import functions_framework

from billing_export_notifier.analysis.anomaly_detector import AnomalyDetector
from billing_export_notifier.analysis.change_rate import materialize, query_change_rate
from billing_export_notifier.analysis.partition_table import create_partition_table
from billing_export_notifier.config import Config, ConfigurationError, load_config
from billing_export_notifier.notifications.slack.notifier import NotificationError, SlackNotifier
from billing_export_notifier.warehouse.base import CostRecord, Warehouse, WarehouseError
from billing_export_notifier.warehouse.bigquery import BigQueryWarehouse


class PipelineError(Exception):
    """A pipeline stage failed; the run stops at that stage."""

    def __init__(self, stage: str, cause: Exception):
        super().__init__(f"{stage}: {cause}")
        self.stage = stage
        self.cause = cause


@dataclass
class PipelineResult:
    """Outcome of a successful run."""

    records: list[CostRecord]
    anomalies: list[CostRecord]
    notified: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": True,
            "records": len(self.records),
            "anomalies": len(self.anomalies),
            "notified": self.notified,
        }


def run_pipeline(
    config: Config,
    warehouse: Warehouse,
    notifier: SlackNotifier,
    dry_run: bool = False,
    force_anomaly: bool = False,
) -> PipelineResult:
    """
    Run the anomaly detection pipeline once.

    Args:
        config: Loaded configuration.
        warehouse: Warehouse holding the billing export.
        notifier: Slack notifier for anomalies.
        dry_run: Detect anomalies but don't send them.
        force_anomaly: Add a synthetic anomaly to exercise the Slack path.

    Returns:
        PipelineResult with every record, the anomalies and the sent count.

    Raises:
        PipelineError: If any stage fails.
    """
    # Checked before any warehouse work, even when nothing will be sent
    _run_stage("validate slack", notifier.validate)

    print(f"Creating table function {config.bigquery.partition_table}...")
    _run_stage("create partition table", create_partition_table, warehouse, config.bigquery)

    print("Querying day-over-day change rate...")
    rows = _run_stage("query change rate", query_change_rate, warehouse, config.bigquery)
    records = _run_stage("materialize", materialize, rows)
    print(f"Loaded {len(records)} project/service cost records")

    if records:
        print(notifier.formatter.format_summary_table(records))

    detector = AnomalyDetector(config.anomaly_detection)
    anomalies = detector.detect(records)

    if force_anomaly:
        test_anomaly = _create_test_anomaly(config, detector.threshold)
        anomalies.append(test_anomaly)
        print(f"[TEST] Injected fake anomaly: {test_anomaly.service}")

    print(detector.get_anomaly_summary(anomalies))

    if dry_run:
        print(f"[SKIP] Would send {len(anomalies)} Slack notifications")
        return PipelineResult(records=records, anomalies=anomalies, notified=0)

    notified = 0
    if anomalies:
        print(f"Sending {len(anomalies)} Slack notifications...")
        notified = _run_stage("notify", notifier.notify, anomalies)
        print(f"Sent {notified} Slack notifications")

    return PipelineResult(records=records, anomalies=anomalies, notified=notified)


def _run_stage(stage: str, func: Callable[..., Any], *args: Any) -> Any:
    try:
        return func(*args)
    except (WarehouseError, NotificationError) as e:
        raise PipelineError(stage, e) from e


def _create_test_anomaly(config: Config, threshold: float) -> CostRecord:
    """Create a record whose change rate is above the threshold."""
    yesterday_cost = 100.0
    today_cost = round(yesterday_cost * (1 + max(threshold, 0) / 100) + 10, 2)
    return CostRecord.from_costs(
        project=config.bigquery.project_id,
        service="[TEST] Billing Export Notifier",
        yesterday_cost=yesterday_cost,
        today_cost=today_cost,
    )


@functions_framework.http
def billing_notification(request: Any) -> tuple[str, int, dict[str, str]]:
    """
    HTTP entry point.

    Environment variables:
    - PROJECT_ID: GCP project (falls back to the metadata server)
    - BILLING_ACCOUNT_ID, DATASET_ID, PARTITION_TABLE_NAME: billing export location
    - SLACK_OAUTH_TOKEN, SLACK_CHANNEL_ID: Slack destination
    - DETECT_ABNORMALY_PERCENTAGE: threshold in percent
    - CONFIG_ENV: Environment (dev, staging, prod)

    Request parameters (query string or JSON body, for testing):
    - dry_run: bool - Run everything but don't send Slack messages
    - force_anomaly: bool - Add a fake anomaly to test Slack delivery

    Returns:
        JSON body, HTTP status code and headers.
    """
    print(f"Billing notification invoked at {datetime.now(UTC).isoformat()}")

    dry_run = _get_flag(request, "dry_run")
    force_anomaly = _get_flag(request, "force_anomaly")

    try:
        config = load_config()
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        return _error_response(500, "config", str(e))

    notifier = SlackNotifier.from_config(config.slack)
    warehouse = BigQueryWarehouse(
        project_id=config.bigquery.project_id,
        location=config.bigquery.location,
    )

    try:
        with warehouse:
            result = run_pipeline(
                config,
                warehouse,
                notifier,
                dry_run=dry_run,
                force_anomaly=force_anomaly,
            )
    except PipelineError as e:
        print(f"Pipeline failed at {e.stage}: {e.cause}")
        return _error_response(500, e.stage, str(e.cause))

    body = result.to_dict()
    print(f"Completed: {json.dumps(body)}")
    return json.dumps(body), 200, {"Content-Type": "application/json"}


def _get_flag(request: Any, name: str) -> bool:
    """Read a boolean flag from the query string or JSON body."""
    value = request.args.get(name)
    if value is None:
        payload = request.get_json(silent=True) or {}
        value = payload.get(name) if isinstance(payload, dict) else None

    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes")
    return bool(value)


def _error_response(status_code: int, stage: str, message: str) -> tuple[str, int, dict[str, str]]:
    """Build an error response."""
    body = {"ok": False, "stage": stage, "error": message}
    return json.dumps(body), status_code, {"Content-Type": "application/json"}
