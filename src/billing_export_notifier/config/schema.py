"""Pydantic configuration schema for Billing Export Notifier."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class BigQueryConfig(BaseModel):
    """BigQuery billing export location and table function target."""

    model_config = ConfigDict(frozen=True)

    project_id: str = Field(min_length=1)
    billing_account_id: str = Field(min_length=1)
    dataset_id: str = Field(min_length=1)
    partition_table_name: str = Field(min_length=1)
    location: str | None = None  # Uses the dataset's location if not set

    @property
    def export_table(self) -> str:
        """Fully-qualified billing export table, e.g. `proj.ds.gcp_billing_export_v1_XXX`."""
        account = self.billing_account_id.replace("-", "_")
        return f"{self.project_id}.{self.dataset_id}.gcp_billing_export_v1_{account}"

    @property
    def partition_table(self) -> str:
        """Fully-qualified table function name."""
        return f"{self.project_id}.{self.dataset_id}.{self.partition_table_name}"


class SlackConfig(BaseModel):
    """Slack destination for anomaly notifications."""

    model_config = ConfigDict(frozen=True)

    oauth_token: str = Field(min_length=1, repr=False)  # Bot token (xoxb-...)
    channel_id: str = Field(min_length=1)


class AnomalyDetectionConfig(BaseModel):
    """Anomaly detection configuration."""

    model_config = ConfigDict(frozen=True)

    threshold_percentage: float  # Percentage, not range-checked (may be negative)


class Config(BaseModel):
    """Root configuration for Billing Export Notifier."""

    model_config = ConfigDict(frozen=True)

    project_name: str = "billing-export-notifier"
    environment: Literal["dev", "staging", "prod"] = "dev"

    bigquery: BigQueryConfig
    slack: SlackConfig
    anomaly_detection: AnomalyDetectionConfig
