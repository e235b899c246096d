"""Google Gemini LLM provider using the google-genai SDK."""

from __future__ import annotations

import json

from google import genai
from google.genai import types
from pydantic import BaseModel

from retail_assistant.exceptions import GenerationError
from retail_assistant.observability.logger import get_logger

logger = get_logger("gemini")


class GeminiProvider:
    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        temperature: float = 0.1,
        max_tokens: int = 4096,
    ) -> None:
        self._client = genai.Client(api_key=api_key)
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        try:
            config = types.GenerateContentConfig(
                temperature=self._temperature if temperature is None else temperature,
                max_output_tokens=max_tokens or self._max_tokens,
            )
            if system:
                config.system_instruction = system

            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=prompt,
                config=config,
            )
            text = response.text or ""
        except Exception as e:
            raise GenerationError(f"Gemini generation failed: {e}") from e

        if not text.strip():
            raise GenerationError("Gemini returned an empty response")
        logger.debug("gemini_generated", model=self._model, chars=len(text))
        return text

    async def generate_structured(
        self,
        prompt: str,
        response_schema: type[BaseModel],
        system: str | None = None,
    ) -> BaseModel:
        try:
            config = types.GenerateContentConfig(
                temperature=0.0,
                response_mime_type="application/json",
                response_schema=response_schema,
            )
            if system:
                config.system_instruction = system

            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=prompt,
                config=config,
            )
            data = json.loads(response.text)
            return response_schema.model_validate(data)
        except Exception as e:
            raise GenerationError(f"Gemini structured generation failed: {e}") from e
