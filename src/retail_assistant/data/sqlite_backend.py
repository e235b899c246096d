"""SQLite data backend and schema provider using aiosqlite.

The database is opened read-only. The time budget is enforced with a
progress handler that interrupts the statement once the deadline passes.
SQLite reports no bytes-processed figure, so the cost ceiling applies to the
bytes of result data materialized.
"""

from __future__ import annotations

import time
from dataclasses import replace
from pathlib import Path
from typing import Any

import aiosqlite

from retail_assistant.config.constants import (
    SCHEMA_SAMPLE_MAX_BYTES,
    SCHEMA_SAMPLE_ROWS,
    SCHEMA_SAMPLE_TIMEOUT_MS,
    SCHEMA_SAMPLE_VALUE_CHARS,
)
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

logger = get_logger("sqlite_backend")

PROGRESS_HANDLER_STEPS = 1000
FETCH_BATCH_SIZE = 200

SQLITE_TYPE_MAP = {
    "INT": "INTEGER",
    "INTEGER": "INTEGER",
    "BIGINT": "INTEGER",
    "REAL": "FLOAT",
    "FLOAT": "FLOAT",
    "DOUBLE": "FLOAT",
    "NUMERIC": "NUMERIC",
    "TEXT": "STRING",
    "VARCHAR": "STRING",
    "BLOB": "BYTES",
    "BOOLEAN": "BOOLEAN",
    "DATE": "DATE",
    "DATETIME": "DATETIME",
    "TIMESTAMP": "TIMESTAMP",
}


def _read_only_uri(db_path: str) -> str:
    return f"file:{Path(db_path).resolve().as_posix()}?mode=ro"


def _categorize(message: str) -> ErrorCategory:
    lowered = message.lower()
    if "interrupted" in lowered:
        return ErrorCategory.TIMEOUT
    if "syntax error" in lowered or "no such" in lowered or "ambiguous column" in lowered:
        return ErrorCategory.SYNTAX_ERROR
    return ErrorCategory.OTHER


def _value_type(value: Any) -> str:
    if isinstance(value, bool):
        return "BOOLEAN"
    if isinstance(value, int):
        return "INTEGER"
    if isinstance(value, float):
        return "FLOAT"
    if isinstance(value, bytes):
        return "BYTES"
    return "STRING"


def _estimate_bytes(values: tuple) -> int:
    total = 0
    for value in values:
        if value is None:
            total += 1
        elif isinstance(value, (int, float)):
            total += 8
        elif isinstance(value, bytes):
            total += len(value)
        else:
            total += len(str(value).encode("utf-8"))
    return total


def _unique_names(names: list[str]) -> list[str]:
    seen: dict[str, int] = {}
    unique = []
    for name in names:
        if name in seen:
            seen[name] += 1
            unique.append(f"{name}_{seen[name]}")
        else:
            seen[name] = 0
            unique.append(name)
    return unique


def _infer_schema(columns: list[str], raw_rows: list[tuple]) -> list[FieldSchema]:
    fields = []
    for i, name in enumerate(columns):
        field_type = "STRING"
        for raw in raw_rows:
            if raw[i] is not None:
                field_type = _value_type(raw[i])
                break
        fields.append(FieldSchema(name=name, type=field_type, mode="NULLABLE"))
    return fields


class SQLiteBackend:
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    @property
    def dialect(self) -> str:
        return "sqlite"

    async def execute(self, sql: str, budget: QueryBudget) -> QueryResult:
        start = time.monotonic()
        deadline = start + budget.timeout_ms / 1000

        def past_deadline() -> int:
            return 1 if time.monotonic() > deadline else 0

        raw_rows: list[tuple] = []
        columns: list[str] = []
        materialized = 0
        try:
            async with aiosqlite.connect(_read_only_uri(self._db_path), uri=True) as db:
                await db.set_progress_handler(past_deadline, PROGRESS_HANDLER_STEPS)
                async with db.execute(sql) as cursor:
                    columns = _unique_names([d[0] for d in cursor.description or []])
                    while True:
                        batch = await cursor.fetchmany(FETCH_BATCH_SIZE)
                        if not batch:
                            break
                        for raw in batch:
                            materialized += _estimate_bytes(tuple(raw))
                            if materialized > budget.max_bytes_billed:
                                raise QueryExecutionError(
                                    f"Query exceeded limit for bytes billed: {budget.max_bytes_billed}",
                                    ErrorCategory.COST_EXCEEDED,
                                )
                            raw_rows.append(tuple(raw))
        except aiosqlite.Error as e:
            category = _categorize(str(e))
            logger.warning("sqlite_query_failed", error=str(e), category=category.value)
            raise QueryExecutionError(f"SQLite query failed: {e}", category) from e

        elapsed_ms = (time.monotonic() - start) * 1000
        rows = [dict(zip(columns, raw)) for raw in raw_rows]
        logger.info(
            "sqlite_query_executed",
            rows=len(rows),
            bytes=materialized,
            elapsed_ms=round(elapsed_ms, 2),
        )
        return QueryResult.from_rows(
            rows=rows,
            field_schema=_infer_schema(columns, raw_rows),
            elapsed_ms=elapsed_ms,
        )

    async def test_connection(self) -> bool:
        try:
            async with aiosqlite.connect(_read_only_uri(self._db_path), uri=True) as db:
                async with db.execute("SELECT 1") as cursor:
                    await cursor.fetchone()
            return True
        except aiosqlite.Error as e:
            logger.warning("sqlite_connection_test_failed", error=str(e))
            return False


class SQLiteSchemaProvider:
    def __init__(self, db_path: str, sample_rows: int = SCHEMA_SAMPLE_ROWS) -> None:
        self._db_path = db_path
        self._sample_rows = sample_rows

    async def describe(self) -> SchemaDescriptor:
        tables: list[TableSchema] = []
        try:
            async with aiosqlite.connect(_read_only_uri(self._db_path), uri=True) as db:
                async with db.execute(
                    "SELECT name FROM sqlite_master "
                    "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
                ) as cursor:
                    names = [row[0] async for row in cursor]

                for name in names:
                    async with db.execute(f'PRAGMA table_info("{name}")') as cursor:
                        columns = await cursor.fetchall()
                    async with db.execute(f'SELECT COUNT(*) FROM "{name}"') as cursor:
                        (row_count,) = await cursor.fetchone()
                    fields = [
                        FieldSchema(
                            name=col[1],
                            type=SQLITE_TYPE_MAP.get((col[2] or "").upper(), (col[2] or "STRING").upper()),
                            mode="REQUIRED" if col[3] or col[5] else "NULLABLE",
                        )
                        for col in columns
                    ]
                    tables.append(TableSchema(name=name, fields=fields, row_count=row_count))
        except aiosqlite.Error as e:
            raise SchemaUnavailableError(f"Failed to read SQLite schema: {e}") from e

        if not tables:
            raise SchemaUnavailableError(f"No tables found in {self._db_path}")

        tables = [await self._with_samples(table) for table in tables]
        return SchemaDescriptor(
            text=format_schema_text(f"SQLite database: {Path(self._db_path).name}", tables),
            tables=tables,
        )

    async def _with_samples(self, table: TableSchema) -> TableSchema:
        if self._sample_rows <= 0:
            return table
        budget = QueryBudget(max_bytes_billed=SCHEMA_SAMPLE_MAX_BYTES, timeout_ms=SCHEMA_SAMPLE_TIMEOUT_MS)
        try:
            result = await SQLiteBackend(self._db_path).execute(
                f'SELECT * FROM "{table.name}" LIMIT {self._sample_rows}', budget
            )
        except QueryExecutionError as e:
            logger.warning("schema_sample_failed", table=table.name, error=str(e))
            return replace(table, sample_unavailable=True)
        return replace(table, sample_rows=result.rows)


def _format_sample_value(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, str) and len(value) > SCHEMA_SAMPLE_VALUE_CHARS:
        return value[:SCHEMA_SAMPLE_VALUE_CHARS] + "..."
    return str(value)


def format_schema_text(header: str, tables: list[TableSchema]) -> str:
    lines = [header, "", "AVAILABLE TABLES AND SCHEMAS:", ""]
    for table in tables:
        count = f" ({table.row_count:,} rows)" if table.row_count is not None else ""
        lines.append(f"TABLE: {table.name}{count}")
        lines.append("Fields:")
        for f in table.fields:
            lines.append(f"  - {f.name}: {f.type} ({f.mode})")
        if table.sample_unavailable:
            lines.append(f"/* Sample data unavailable for {table.name} */")
        elif table.sample_rows:
            headers = list(table.sample_rows[0])
            lines.append("/*")
            lines.append(f"{len(table.sample_rows)} rows from {table.name} table:")
            lines.append("\t".join(headers))
            for row in table.sample_rows:
                lines.append("\t".join(_format_sample_value(row.get(h)) for h in headers))
            lines.append("*/")
        lines.append("")
    return "\n".join(lines)
