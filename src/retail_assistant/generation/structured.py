"""Strict parsing of structured model output.

Model output is untrusted: anything that does not validate against the
expected schema is an error the caller must handle with its own fallback.
"""

from __future__ import annotations

import json
import re
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from retail_assistant.exceptions import GenerationError
from retail_assistant.observability.logger import get_logger
from retail_assistant.protocols.llm import LanguageModel

logger = get_logger("structured_output")

T = TypeVar("T", bound=BaseModel)

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")


def parse_json_model(raw: str, schema: type[T]) -> T:
    text = _FENCE_RE.sub("", raw.strip()).strip()
    try:
        data = json.loads(text)
        return schema.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        raise GenerationError(f"Unparsable {schema.__name__}: {e}") from e


async def request_structured(
    llm: LanguageModel,
    prompt: str,
    schema: type[T],
    system: str | None = None,
) -> T:
    """Structured call first, then plain generation parsed as JSON."""
    try:
        result = await llm.generate_structured(prompt, schema, system=system)
        if isinstance(result, schema):
            return result
        return schema.model_validate(result.model_dump())
    except Exception as e:
        logger.debug("structured_generation_failed", schema=schema.__name__, error=str(e))

    try:
        raw = await llm.generate(prompt, system=system)
    except GenerationError:
        raise
    except Exception as e:
        raise GenerationError(f"Language model call failed: {e}") from e
    return parse_json_model(raw, schema)
