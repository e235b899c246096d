"""Protocols for the two capabilities the orchestrator delegates to."""

from __future__ import annotations

from typing import Protocol

from retail_assistant.models.domain import KnowledgeAnswer, QueryAnswer


class KnowledgeHandler(Protocol):
    async def process(self, query: str) -> KnowledgeAnswer: ...


class QueryHandler(Protocol):
    async def process(self, query: str) -> QueryAnswer: ...
