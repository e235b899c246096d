"""Query capability: question -> one read-only SQL statement -> live or simulated result."""

from __future__ import annotations

from typing import Any

from retail_assistant.config.constants import PREVIEW_ROWS, PREVIEW_VALUE_CHARS
from retail_assistant.config.settings import Settings
from retail_assistant.data.schema_cache import SchemaCache
from retail_assistant.exceptions import ErrorCategory, QueryExecutionError
from retail_assistant.generation.prompt_templates import (
    SQL_GENERATION_PROMPT,
    SQL_MODEL_FAILURE_MESSAGE,
    SQL_SYSTEM,
)
from retail_assistant.models.domain import (
    CapabilityStatus,
    QueryAnswer,
    QueryBudget,
    QueryResult,
    SchemaDescriptor,
)
from retail_assistant.observability.logger import get_logger
from retail_assistant.observability.metrics import log_query_execution
from retail_assistant.protocols.data_backend import DataBackend
from retail_assistant.protocols.llm import LanguageModel
from retail_assistant.safety.filter import SafetyFilter
from retail_assistant.sql.optimizer import tighten_for_large_tables
from retail_assistant.sql.parsing import extract_sql, split_narrative
from retail_assistant.sql.simulation import SimulatedResultGenerator
from retail_assistant.sql.validation import validate_read_only

logger = get_logger("query")

ERROR_GUIDANCE: dict[ErrorCategory, str] = {
    ErrorCategory.COST_EXCEEDED: (
        "The live query would have processed more data than the cost ceiling allows. "
        "Narrow the question to a shorter time range or specific categories to get live figures."
    ),
    ErrorCategory.SYNTAX_ERROR: (
        "The generated query could not be run against the warehouse schema. "
        "Rephrasing the question with explicit metrics and dimensions usually helps."
    ),
    ErrorCategory.TIMEOUT: (
        "The live query took longer than the time budget allows. "
        "Try a simpler question or a smaller time window."
    ),
    ErrorCategory.OTHER: "The live data warehouse could not be reached for this question.",
}

REJECTED_SQL_GUIDANCE = (
    "The generated statement was not a single read-only SELECT, so it was not executed."
)


def _format_value(value: Any) -> str:
    if value is None:
        return "NULL"
    text = str(value)
    if len(text) > PREVIEW_VALUE_CHARS:
        return text[:PREVIEW_VALUE_CHARS] + "..."
    return text


def summarize_result(result: QueryResult, using_live_data: bool) -> str:
    if result.row_count == 0:
        return "The query ran successfully but found no matching data."

    source = "Live query" if using_live_data else "Illustrative (simulated) data"
    lines = [f"{source} returned {result.row_count} rows:"]
    names = [f.name for f in result.field_schema]
    for i, row in enumerate(result.rows[:PREVIEW_ROWS], 1):
        cells = ", ".join(f"{name}={_format_value(row.get(name))}" for name in names)
        lines.append(f"Row {i}: {cells}")
    if result.row_count > PREVIEW_ROWS:
        lines.append(f"... and {result.row_count - PREVIEW_ROWS} more rows")
    return "\n".join(lines)


def known_columns(schema: SchemaDescriptor) -> dict[str, set[str]] | None:
    if not schema.tables:
        return None
    return {t.name.lower(): {f.name.lower() for f in t.fields} for t in schema.tables}


class QueryCapability:
    def __init__(
        self,
        llm: LanguageModel,
        backend: DataBackend | None,
        schema_cache: SchemaCache,
        settings: Settings,
        simulator: SimulatedResultGenerator | None = None,
        safety_filter: SafetyFilter | None = None,
    ) -> None:
        self._llm = llm
        self._backend = backend
        self._schema_cache = schema_cache
        self._simulator = simulator or SimulatedResultGenerator(settings.simulation_seed)
        self._safety = safety_filter
        self._settings = settings
        self._budget = QueryBudget(
            max_bytes_billed=settings.max_bytes_billed,
            timeout_ms=settings.query_timeout_ms,
        )

    @property
    def dialect(self) -> str:
        return self._backend.dialect if self._backend is not None else "standard"

    async def process(self, query: str) -> QueryAnswer:
        # 1. Schema
        schema = await self._schema_cache.get()

        # 2. Generation
        model_output = await self._generate(query, schema)

        # 3. Validation
        candidate = extract_sql(model_output) if model_output is not None else None
        validation = validate_read_only(candidate)
        if candidate is not None and not validation.accepted:
            logger.warning("sql_rejected", reason=validation.reason)

        # 4/5. Execution or simulation
        sql = validation.sql
        result: QueryResult | None = None
        error_category: ErrorCategory | None = None
        if sql is not None:
            sql = tighten_for_large_tables(
                sql,
                dialect=self.dialect,
                large_tables=self._settings.large_tables,
                recency_column=self._settings.recency_column,
                recency_days=self._settings.recency_days,
                max_rows=self._settings.max_result_rows,
                known_columns=known_columns(schema),
            ).sql
            result, error_category = await self._execute(sql)

        using_live_data = result is not None
        if result is None:
            result = self._simulator.generate(sql)

        log_query_execution(
            using_live_data=using_live_data,
            row_count=result.row_count,
            elapsed_ms=result.elapsed_ms,
            error_category=error_category.value if error_category else None,
        )

        # 6. Narration
        message = self._compose_message(
            model_output, validation.accepted, candidate, error_category, result, using_live_data
        )
        reasoning = self._reasoning(
            model_output, candidate, validation.reason, error_category, result, using_live_data
        )
        confidence = self._base_confidence(model_output, using_live_data)
        if self._safety is not None:
            verdict = await self._safety.check_response(message)
            confidence = min(confidence, verdict.score)

        return QueryAnswer(
            message=message,
            reasoning=reasoning,
            confidence=confidence,
            sql_query=sql,
            result=result,
            using_live_data=using_live_data,
            status=CapabilityStatus.OK if using_live_data else CapabilityStatus.FALLBACK,
            error_category=error_category,
        )

    async def _generate(self, query: str, schema: SchemaDescriptor) -> str | None:
        prompt = SQL_GENERATION_PROMPT.format(schema=schema.text, query=query)
        system = SQL_SYSTEM.format(
            dialect=self.dialect,
            large_tables=", ".join(self._settings.large_tables),
            recency_column=self._settings.recency_column,
        )
        try:
            return await self._llm.generate(prompt, system=system)
        except Exception as e:
            logger.warning("sql_generation_failed", error=str(e))
            return None

    async def _execute(self, sql: str) -> tuple[QueryResult | None, ErrorCategory | None]:
        if self._backend is None:
            logger.info("no_live_backend_configured")
            return None, None
        try:
            result = await self._backend.execute(sql, self._budget)
        except QueryExecutionError as e:
            logger.warning("sql_execution_failed", category=e.category.value, error=str(e))
            return None, e.category
        except Exception as e:
            logger.warning("sql_execution_failed", category=ErrorCategory.OTHER.value, error=str(e))
            return None, ErrorCategory.OTHER
        logger.info("sql_executed", rows=result.row_count, elapsed_ms=round(result.elapsed_ms, 2))
        return result, None

    def _compose_message(
        self,
        model_output: str | None,
        accepted: bool,
        candidate: str | None,
        error_category: ErrorCategory | None,
        result: QueryResult,
        using_live_data: bool,
    ) -> str:
        parts = []
        if model_output is None:
            parts.append(SQL_MODEL_FAILURE_MESSAGE)
        else:
            narrative = split_narrative(model_output)
            if narrative:
                parts.append(narrative)
        if candidate is not None and not accepted:
            parts.append(REJECTED_SQL_GUIDANCE)
        if error_category is not None:
            parts.append(ERROR_GUIDANCE[error_category])
        parts.append(summarize_result(result, using_live_data))
        return "\n\n".join(parts)

    def _reasoning(
        self,
        model_output: str | None,
        candidate: str | None,
        rejection: str | None,
        error_category: ErrorCategory | None,
        result: QueryResult,
        using_live_data: bool,
    ) -> str:
        if using_live_data:
            return (
                f"Generated and validated a read-only SQL query, executed it against live "
                f"{self.dialect} data ({result.row_count} rows)."
            )
        if model_output is None:
            cause = "SQL generation was unavailable"
        elif candidate is None or rejection is not None:
            cause = f"no valid statement was produced ({rejection})"
        elif error_category is not None:
            cause = f"live execution failed ({error_category.value})"
        else:
            cause = "no live data backend is configured"
        return f"Used simulated data because {cause}."

    def _base_confidence(self, model_output: str | None, using_live_data: bool) -> float:
        if model_output is None:
            return self._settings.query_model_failure_confidence
        if using_live_data:
            return self._settings.query_live_confidence
        return self._settings.query_simulated_confidence
