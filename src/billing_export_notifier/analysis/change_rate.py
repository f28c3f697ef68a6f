"""Day-over-day change rate query and result materialization."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from billing_export_notifier.config.schema import BigQueryConfig
from billing_export_notifier.warehouse.base import CostRecord, Warehouse, WarehouseError

# "today" is the last complete day (CURRENT_DATE - 1) and "yesterday" the one before it
CHANGE_RATE_SQL = """\
SELECT
  today.proj,
  today.service_name,
  yesterday.cost AS yesterday_cost,
  today.cost AS today_cost,
  ROUND(SAFE_MULTIPLY(SAFE_DIVIDE(today.cost - yesterday.cost, yesterday.cost), 100), 2) AS change_rate
FROM `{partition_table}`(SAFE_CAST(DATE_SUB(CURRENT_DATE(), INTERVAL 1 DAY) AS STRING)) AS today
INNER JOIN `{partition_table}`(SAFE_CAST(DATE_SUB(CURRENT_DATE(), INTERVAL 2 DAY) AS STRING)) AS yesterday
  ON today.proj = yesterday.proj
  AND today.service_name = yesterday.service_name"""


def build_change_rate_sql(config: BigQueryConfig) -> str:
    """Build the query joining the last two days of the table function."""
    return CHANGE_RATE_SQL.format(partition_table=config.partition_table)


def query_change_rate(
    warehouse: Warehouse,
    config: BigQueryConfig,
) -> Iterator[Mapping[str, Any]]:
    """
    Query the change rate per (project, service) between the last two days.

    Pairs missing from either day are dropped by the inner join. Rows are
    returned lazily.

    Args:
        warehouse: Warehouse where the table function was created.
        config: BigQuery configuration naming the table function.

    Returns:
        Iterator over rows with proj, service_name, yesterday_cost,
        today_cost and change_rate columns.

    Raises:
        WarehouseError: If the query fails to start.
    """
    return warehouse.query(build_change_rate_sql(config))


def materialize(rows: Iterable[Mapping[str, Any]]) -> list[CostRecord]:
    """
    Drain result rows into cost records, keeping warehouse order.

    Raises:
        WarehouseError: If fetching a row fails part way through.
    """
    records: list[CostRecord] = []
    iterator = iter(rows)
    while True:
        try:
            row = next(iterator)
        except StopIteration:
            break
        except Exception as e:
            raise WarehouseError(f"error iterating through results: {e}") from e
        records.append(CostRecord.from_row(row))
    return records
