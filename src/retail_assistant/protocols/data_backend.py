"""Protocol for SQL data backends."""

from __future__ import annotations

from typing import Protocol

from retail_assistant.models.domain import QueryBudget, QueryResult


class DataBackend(Protocol):
    @property
    def dialect(self) -> str: ...

    async def execute(self, sql: str, budget: QueryBudget) -> QueryResult:
        """Run one read-only statement. Raises QueryExecutionError with a category."""
        ...

    async def test_connection(self) -> bool: ...
