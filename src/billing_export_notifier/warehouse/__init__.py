"""Billing data warehouse access for Billing Export Notifier."""

from billing_export_notifier.warehouse.base import (
    CostRecord,
    Warehouse,
    WarehouseError,
    calculate_change_rate,
    safe_divide,
)
from billing_export_notifier.warehouse.bigquery import BigQueryWarehouse

__all__ = [
    "CostRecord",
    "Warehouse",
    "WarehouseError",
    "BigQueryWarehouse",
    "calculate_change_rate",
    "safe_divide",
]
