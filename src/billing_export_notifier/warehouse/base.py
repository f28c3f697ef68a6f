"""Base classes for the billing data warehouse."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any


class WarehouseError(Exception):
    """Error defining, querying or reading from the warehouse."""

    pass


def safe_divide(numerator: float | None, denominator: float | None) -> float | None:
    """Divide like BigQuery's SAFE_DIVIDE: None instead of an error on a zero divisor."""
    if numerator is None or denominator is None or denominator == 0:
        return None
    return numerator / denominator


def calculate_change_rate(
    yesterday_cost: float | None,
    today_cost: float | None,
) -> float | None:
    """Percentage change from yesterday to today, rounded to 2 decimals."""
    if yesterday_cost is None or today_cost is None:
        return None
    ratio = safe_divide(today_cost - yesterday_cost, yesterday_cost)
    if ratio is None:
        return None
    return round(ratio * 100, 2)


def _optional_float(value: Any) -> float | None:
    return None if value is None else float(value)


@dataclass(frozen=True)
class CostRecord:
    """
    Day-over-day cost for one (project, service) pair.

    Costs and change rate are None when the warehouse returned NULL; a
    change rate is only present when both costs are and yesterday's is
    non-zero.
    """

    project: str
    service: str
    yesterday_cost: float | None
    today_cost: float | None
    change_rate: float | None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> CostRecord:
        """
        Convert a change-rate result row into a record.

        Args:
            row: Row with proj, service_name, yesterday_cost, today_cost
                and change_rate columns.

        Returns:
            CostRecord with the row's values; NULLs stay None.
        """
        return cls(
            project=row["proj"],
            service=row["service_name"],
            yesterday_cost=_optional_float(row["yesterday_cost"]),
            today_cost=_optional_float(row["today_cost"]),
            change_rate=_optional_float(row["change_rate"]),
        )

    @classmethod
    def from_costs(
        cls,
        project: str,
        service: str,
        yesterday_cost: float | None,
        today_cost: float | None,
    ) -> CostRecord:
        """Build a record locally, computing the change rate the way the query does."""
        return cls(
            project=project,
            service=service,
            yesterday_cost=yesterday_cost,
            today_cost=today_cost,
            change_rate=calculate_change_rate(yesterday_cost, today_cost),
        )


class Warehouse(ABC):
    """Query execution capability the pipeline needs from a data warehouse."""

    @abstractmethod
    def execute(self, sql: str) -> None:
        """
        Run a DDL/DML statement that returns no rows.

        Raises:
            WarehouseError: If the statement fails.
        """
        pass

    @abstractmethod
    def query(self, sql: str) -> Iterator[Mapping[str, Any]]:
        """
        Run a query and return a lazy iterator over its rows.

        Errors raised while iterating propagate from the iterator itself.

        Raises:
            WarehouseError: If the query cannot be started.
        """
        pass

    def close(self) -> None:
        """Release the underlying connection."""
        pass

    def __enter__(self) -> Warehouse:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
