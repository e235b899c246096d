"""Protocol for schema providers."""

from __future__ import annotations

from typing import Protocol

from retail_assistant.models.domain import SchemaDescriptor


class SchemaProvider(Protocol):
    async def describe(self) -> SchemaDescriptor: ...
