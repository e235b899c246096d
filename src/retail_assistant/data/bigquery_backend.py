"""BigQuery data backend and schema provider using google-cloud-bigquery.

The client is synchronous; calls run in a worker thread. The cost ceiling
maps to ``maximum_bytes_billed`` and the time budget to ``job_timeout_ms``
plus the result wait timeout.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import time
from dataclasses import replace

from google.api_core import exceptions as google_exceptions
from google.cloud import bigquery

from retail_assistant.config.constants import (
    SCHEMA_SAMPLE_MAX_BYTES,
    SCHEMA_SAMPLE_ROWS,
    SCHEMA_SAMPLE_TIMEOUT_MS,
)
from retail_assistant.data.sqlite_backend import format_schema_text
from retail_assistant.exceptions import (
    ErrorCategory,
    QueryExecutionError,
    SchemaUnavailableError,
)
from retail_assistant.models.domain import (
    FieldSchema,
    QueryBudget,
    QueryResult,
    SchemaDescriptor,
    TableSchema,
)
from retail_assistant.observability.logger import get_logger

logger = get_logger("bigquery_backend")


def categorize_bigquery_error(message: str) -> ErrorCategory:
    lowered = message.lower()
    if "bytes billed" in lowered or "bytesbilledlimitexceeded" in lowered:
        return ErrorCategory.COST_EXCEEDED
    if "timeout" in lowered or "timed out" in lowered or "deadline" in lowered:
        return ErrorCategory.TIMEOUT
    if "syntax error" in lowered or "unrecognized name" in lowered or "not found: table" in lowered:
        return ErrorCategory.SYNTAX_ERROR
    return ErrorCategory.OTHER


class BigQueryBackend:
    def __init__(
        self,
        project_id: str,
        dataset_id: str,
        location: str = "US",
        client: bigquery.Client | None = None,
    ) -> None:
        self._project_id = project_id
        self._dataset_id = dataset_id
        self._location = location
        self._client = client or bigquery.Client(project=project_id)

    @property
    def dialect(self) -> str:
        return "bigquery"

    async def execute(self, sql: str, budget: QueryBudget) -> QueryResult:
        return await asyncio.to_thread(self._execute_sync, sql, budget)

    def _execute_sync(self, sql: str, budget: QueryBudget) -> QueryResult:
        start = time.monotonic()
        job_config = bigquery.QueryJobConfig(
            maximum_bytes_billed=budget.max_bytes_billed,
            default_dataset=f"{self._project_id}.{self._dataset_id}",
            use_legacy_sql=False,
        )
        job_config.job_timeout_ms = budget.timeout_ms

        try:
            job = self._client.query(sql, job_config=job_config, location=self._location)
            row_iterator = job.result(timeout=budget.timeout_ms / 1000)
            rows = [dict(row.items()) for row in row_iterator]
            schema = row_iterator.schema or []
        except concurrent.futures.TimeoutError as e:
            raise QueryExecutionError(
                f"BigQuery query timed out after {budget.timeout_ms} ms", ErrorCategory.TIMEOUT
            ) from e
        except google_exceptions.GoogleAPICallError as e:
            category = categorize_bigquery_error(str(e))
            logger.warning("bigquery_query_failed", error=str(e), category=category.value)
            raise QueryExecutionError(f"BigQuery query failed: {e}", category) from e

        elapsed_ms = (time.monotonic() - start) * 1000
        logger.info(
            "bigquery_query_executed",
            rows=len(rows),
            bytes_processed=job.total_bytes_processed,
            elapsed_ms=round(elapsed_ms, 2),
        )
        return QueryResult.from_rows(
            rows=rows,
            field_schema=[
                FieldSchema(name=f.name, type=f.field_type, mode=f.mode or "NULLABLE")
                for f in schema
            ],
            elapsed_ms=elapsed_ms,
        )

    async def test_connection(self) -> bool:
        budget = QueryBudget(max_bytes_billed=1_000_000, timeout_ms=10_000)
        try:
            await self.execute("SELECT 'connection_test' AS test_type", budget)
            return True
        except QueryExecutionError as e:
            logger.warning("bigquery_connection_test_failed", error=str(e))
            return False


class BigQuerySchemaProvider:
    def __init__(
        self,
        project_id: str,
        dataset_id: str,
        location: str = "US",
        client: bigquery.Client | None = None,
        sample_rows: int = SCHEMA_SAMPLE_ROWS,
    ) -> None:
        self._project_id = project_id
        self._dataset_id = dataset_id
        self._location = location
        self._client = client or bigquery.Client(project=project_id)
        self._sample_rows = sample_rows

    async def describe(self) -> SchemaDescriptor:
        return await asyncio.to_thread(self._describe_sync)

    def _describe_sync(self) -> SchemaDescriptor:
        dataset_ref = f"{self._project_id}.{self._dataset_id}"
        try:
            tables = []
            for item in self._client.list_tables(dataset_ref):
                table = self._client.get_table(item.reference)
                tables.append(
                    TableSchema(
                        name=table.table_id,
                        fields=[
                            FieldSchema(name=f.name, type=f.field_type, mode=f.mode or "NULLABLE")
                            for f in table.schema
                        ],
                        row_count=table.num_rows,
                    )
                )
        except google_exceptions.GoogleAPICallError as e:
            raise SchemaUnavailableError(f"Failed to get dataset information: {e}") from e

        if not tables:
            raise SchemaUnavailableError(f"No tables found in {dataset_ref}")

        tables = [self._with_samples(table) for table in tables]
        return SchemaDescriptor(
            text=format_schema_text(f"BigQuery Dataset: {dataset_ref}", tables),
            tables=tables,
        )

    def _with_samples(self, table: TableSchema) -> TableSchema:
        if self._sample_rows <= 0:
            return table
        sql = (
            f"SELECT * FROM `{self._project_id}.{self._dataset_id}.{table.name}` "
            f"LIMIT {self._sample_rows}"
        )
        job_config = bigquery.QueryJobConfig(
            maximum_bytes_billed=SCHEMA_SAMPLE_MAX_BYTES, use_legacy_sql=False
        )
        try:
            job = self._client.query(sql, job_config=job_config, location=self._location)
            rows = [dict(row.items()) for row in job.result(timeout=SCHEMA_SAMPLE_TIMEOUT_MS / 1000)]
        except (google_exceptions.GoogleAPICallError, concurrent.futures.TimeoutError) as e:
            logger.warning("schema_sample_failed", table=table.name, error=str(e))
            return replace(table, sample_unavailable=True)
        return replace(table, sample_rows=rows)
