"""Per-day cost aggregation table function over the billing export."""

from billing_export_notifier.config.schema import BigQueryConfig
from billing_export_notifier.warehouse.base import Warehouse

PARTITION_TABLE_SQL = """\
CREATE OR REPLACE TABLE FUNCTION `{partition_table}`(part_date STRING)
AS (
  SELECT project.id AS proj, service.description AS service_name, SUM(cost) AS cost
  FROM `{export_table}`
  WHERE CAST(DATE(_PARTITIONTIME) AS STRING) = part_date
  GROUP BY project.id, service.description
)"""


def build_partition_table_sql(config: BigQueryConfig) -> str:
    """Build the CREATE OR REPLACE statement for the daily cost table function."""
    return PARTITION_TABLE_SQL.format(
        partition_table=config.partition_table,
        export_table=config.export_table,
    )


def create_partition_table(warehouse: Warehouse, config: BigQueryConfig) -> None:
    """
    Create or replace the table function aggregating cost per project and service.

    The function takes a `YYYY-MM-DD` string and sums the cost of every
    billing line in that day's export partition. Re-running replaces the
    definition in place.

    Raises:
        WarehouseError: If the definition is rejected.
    """
    warehouse.execute(build_partition_table_sql(config))
