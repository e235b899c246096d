"""Protocol for LLM providers."""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel


class LanguageModel(Protocol):
    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str: ...

    async def generate_structured(
        self,
        prompt: str,
        response_schema: type[BaseModel],
        system: str | None = None,
    ) -> BaseModel: ...
