"""Language model stand-in used when no API key is configured.

Every call raises, so each caller takes its deterministic fallback path
(keyword routing, static knowledge text, simulated data, concatenated
synthesis, fail-open safety).
"""

from __future__ import annotations

from pydantic import BaseModel

from retail_assistant.exceptions import GenerationError


class DisabledLanguageModel:
    def __init__(self, reason: str = "no language model configured") -> None:
        self._reason = reason

    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        raise GenerationError(self._reason)

    async def generate_structured(
        self,
        prompt: str,
        response_schema: type[BaseModel],
        system: str | None = None,
    ) -> BaseModel:
        raise GenerationError(self._reason)
