"""Configuration management for Billing Export Notifier."""

from billing_export_notifier.config.schema import (
    AnomalyDetectionConfig,
    BigQueryConfig,
    Config,
    SlackConfig,
)
from billing_export_notifier.config.loader import ConfigurationError, load_config

__all__ = [
    "Config",
    "BigQueryConfig",
    "SlackConfig",
    "AnomalyDetectionConfig",
    "ConfigurationError",
    "load_config",
]
