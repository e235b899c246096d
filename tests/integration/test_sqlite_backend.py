"""Integration tests for the SQLite data backend and schema provider."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import aiosqlite
import pytest

from retail_assistant.capabilities.query import QueryCapability
from retail_assistant.data.schema_cache import SchemaCache
from retail_assistant.data.sqlite_backend import SQLiteBackend, SQLiteSchemaProvider, format_schema_text
from retail_assistant.exceptions import ErrorCategory, QueryExecutionError, SchemaUnavailableError
from retail_assistant.models.domain import FieldSchema, QueryBudget, TableSchema
from tests.fakes import SQL, FakeLanguageModel

BUDGET = QueryBudget(max_bytes_billed=10_000_000, timeout_ms=30_000)


def _ts(days_ago: float) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=days_ago)).strftime("%Y-%m-%d %H:%M:%S")


@pytest.fixture
async def db_path(tmp_dir):
    path = str(Path(tmp_dir) / "retail.db")
    async with aiosqlite.connect(path) as db:
        await db.executescript(
            """
            CREATE TABLE sales (
                sale_id TEXT PRIMARY KEY,
                category TEXT NOT NULL,
                total_amount REAL NOT NULL,
                note TEXT
            );
            CREATE TABLE order_items (
                id INTEGER PRIMARY KEY,
                status TEXT NOT NULL,
                created_at TIMESTAMP NOT NULL
            );
            """
        )
        await db.executemany(
            "INSERT INTO sales VALUES (?, ?, ?, ?)",
            [("T1", "Bags", 120.0, None), ("T2", "Shoes", 80.5, "promo"), ("T3", "Bags", 40.0, None)],
        )
        await db.executemany(
            "INSERT INTO order_items (status, created_at) VALUES (?, ?)",
            [("Complete", _ts(1)), ("Complete", _ts(2)), ("Returned", _ts(3)), ("Complete", _ts(30))],
        )
        await db.commit()
    return path


@pytest.mark.asyncio
async def test_execute_select(db_path):
    result = await SQLiteBackend(db_path).execute(
        "SELECT category, SUM(total_amount) AS total_sales, COUNT(*) AS n "
        "FROM sales GROUP BY category ORDER BY category",
        BUDGET,
    )
    assert result.row_count == 2
    assert result.rows[0] == {"category": "Bags", "total_sales": 160.0, "n": 2}
    assert [(f.name, f.type) for f in result.field_schema] == [
        ("category", "STRING"),
        ("total_sales", "FLOAT"),
        ("n", "INTEGER"),
    ]
    assert result.elapsed_ms >= 0


@pytest.mark.asyncio
async def test_empty_result(db_path):
    result = await SQLiteBackend(db_path).execute("SELECT * FROM sales WHERE 1 = 0", BUDGET)
    assert result.row_count == 0
    assert [f.name for f in result.field_schema] == ["sale_id", "category", "total_amount", "note"]


@pytest.mark.asyncio
async def test_nulls_preserved(db_path):
    result = await SQLiteBackend(db_path).execute("SELECT note FROM sales ORDER BY sale_id", BUDGET)
    assert [r["note"] for r in result.rows] == [None, "promo", None]


@pytest.mark.asyncio
@pytest.mark.parametrize("sql", ["SELEC * FROM sales", "SELECT * FROM missing_table", "SELECT nope FROM sales"])
async def test_syntax_errors_categorized(db_path, sql):
    with pytest.raises(QueryExecutionError) as exc:
        await SQLiteBackend(db_path).execute(sql, BUDGET)
    assert exc.value.category is ErrorCategory.SYNTAX_ERROR


@pytest.mark.asyncio
async def test_cost_ceiling(db_path):
    with pytest.raises(QueryExecutionError) as exc:
        await SQLiteBackend(db_path).execute(
            "SELECT * FROM sales", QueryBudget(max_bytes_billed=20, timeout_ms=30_000)
        )
    assert exc.value.category is ErrorCategory.COST_EXCEEDED


@pytest.mark.asyncio
async def test_timeout_interrupts(db_path):
    runaway = "WITH RECURSIVE c(x) AS (SELECT 1 UNION ALL SELECT x + 1 FROM c) SELECT MAX(x) FROM c"
    with pytest.raises(QueryExecutionError) as exc:
        await SQLiteBackend(db_path).execute(runaway, QueryBudget(max_bytes_billed=10_000_000, timeout_ms=50))
    assert exc.value.category is ErrorCategory.TIMEOUT


@pytest.mark.asyncio
async def test_connection_is_read_only(db_path):
    with pytest.raises(QueryExecutionError):
        await SQLiteBackend(db_path).execute("DELETE FROM sales", BUDGET)
    result = await SQLiteBackend(db_path).execute("SELECT COUNT(*) AS n FROM sales", BUDGET)
    assert result.rows == [{"n": 3}]


@pytest.mark.asyncio
async def test_connection_check(db_path, tmp_dir):
    assert await SQLiteBackend(db_path).test_connection()
    assert not await SQLiteBackend(str(Path(tmp_dir) / "absent.db")).test_connection()


@pytest.mark.asyncio
async def test_schema_provider_describes_tables(db_path):
    descriptor = await SQLiteSchemaProvider(db_path).describe()
    assert [t.name for t in descriptor.tables] == ["order_items", "sales"]
    sales = descriptor.tables[1]
    assert sales.row_count == 3
    modes = {f.name: f.mode for f in sales.fields}
    assert modes == {"sale_id": "REQUIRED", "category": "REQUIRED", "total_amount": "REQUIRED", "note": "NULLABLE"}
    assert {f.name: f.type for f in sales.fields}["total_amount"] == "FLOAT"
    assert "TABLE: sales (3 rows)" in descriptor.text


@pytest.mark.asyncio
async def test_schema_provider_empty_database(tmp_dir):
    path = str(Path(tmp_dir) / "empty.db")
    async with aiosqlite.connect(path) as db:
        await db.commit()
    with pytest.raises(SchemaUnavailableError):
        await SQLiteSchemaProvider(path).describe()


@pytest.mark.asyncio
async def test_query_capability_tightens_large_table(db_path, settings):
    llm = FakeLanguageModel({SQL: "SQL_QUERY: SELECT status, COUNT(*) AS n FROM order_items GROUP BY status ORDER BY status"})
    capability = QueryCapability(
        llm=llm,
        backend=SQLiteBackend(db_path),
        schema_cache=SchemaCache(SQLiteSchemaProvider(db_path)),
        settings=settings,
    )
    answer = await capability.process("Order items by status?")
    assert answer.using_live_data
    assert "WHERE created_at >= datetime('now', '-7 days')" in answer.sql_query
    assert answer.sql_query.endswith("LIMIT 1000")
    # The 30-day-old row is filtered out.
    assert answer.result.rows == [{"status": "Complete", "n": 2}, {"status": "Returned", "n": 1}]


@pytest.mark.asyncio
async def test_schema_provider_includes_sample_rows(db_path):
    descriptor = await SQLiteSchemaProvider(db_path).describe()
    sales = descriptor.tables[1]
    assert [r["sale_id"] for r in sales.sample_rows] == ["T1", "T2", "T3"]
    assert "/*\n3 rows from sales table:\nsale_id\tcategory\ttotal_amount\tnote\n" in descriptor.text
    assert "T1\tBags\t120.0\tNULL" in descriptor.text


@pytest.mark.asyncio
async def test_schema_sample_failure_keeps_schema(db_path, monkeypatch):
    monkeypatch.setattr("retail_assistant.data.sqlite_backend.SCHEMA_SAMPLE_MAX_BYTES", 1)
    descriptor = await SQLiteSchemaProvider(db_path).describe()
    assert all(t.sample_unavailable for t in descriptor.tables)
    assert "/* Sample data unavailable for sales */" in descriptor.text
    assert "TABLE: sales (3 rows)" in descriptor.text


def test_sample_values_truncated():
    table = TableSchema(
        name="products",
        fields=[FieldSchema(name="name", type="STRING", mode="NULLABLE")],
        sample_rows=[{"name": "Organic Cotton Crewneck Sweater"}, {"name": None}],
    )
    text = format_schema_text("SQLite database: retail.db", [table])
    assert "Organic Cotton Crewn..." in text
    assert "\nNULL\n" in text


@pytest.mark.asyncio
async def test_window_query_runs_live_after_tightening(db_path, settings):
    llm = FakeLanguageModel(
        {SQL: "SQL_QUERY: SELECT id, status, ROW_NUMBER() OVER (ORDER BY created_at) AS rn FROM order_items"}
    )
    capability = QueryCapability(
        llm=llm,
        backend=SQLiteBackend(db_path),
        schema_cache=SchemaCache(SQLiteSchemaProvider(db_path)),
        settings=settings,
    )
    answer = await capability.process("Rank recent order items")
    assert answer.using_live_data
    assert "OVER (ORDER BY created_at)" in answer.sql_query
    assert answer.result.row_count == 3
