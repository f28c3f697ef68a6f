"""BigQuery warehouse client.

Queries are billed by bytes scanned; the billing export table is
partitioned by ingestion day so the table function only reads one
partition per call.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import bigquery

from billing_export_notifier.warehouse.base import Warehouse, WarehouseError


class BigQueryWarehouse(Warehouse):
    """Run statements and queries against BigQuery."""

    def __init__(
        self,
        project_id: str,
        location: str | None = None,
        client: bigquery.Client | None = None,
    ):
        """
        Initialize the BigQuery warehouse.

        Args:
            project_id: Project that runs (and pays for) the query jobs.
            location: Job location, e.g. "US". Defaults to the dataset's.
            client: Optional pre-built BigQuery client.
        """
        self.project_id = project_id
        self.location = location
        self._client = client

    @property
    def client(self) -> bigquery.Client:
        """Get or create the BigQuery client."""
        if self._client is None:
            self._client = bigquery.Client(project=self.project_id, location=self.location)
        return self._client

    def execute(self, sql: str) -> None:
        try:
            self.client.query(sql).result()
        except (GoogleAPIError, GoogleAuthError) as e:
            raise WarehouseError(f"BigQuery statement failed: {e}") from e

    def query(self, sql: str) -> Iterator[Mapping[str, Any]]:
        try:
            # RowIterator fetches further pages on demand
            return iter(self.client.query(sql).result())
        except (GoogleAPIError, GoogleAuthError) as e:
            raise WarehouseError(f"BigQuery query failed: {e}") from e

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
