"""Merge capability outputs into one answer."""

from __future__ import annotations

from dataclasses import dataclass

from retail_assistant.config.constants import (
    SINGLE_CAPABILITY_PREFIX,
    SYNTHESIS_FALLBACK_CONNECTOR,
    SYNTHESIS_FALLBACK_PREFIX,
)
from retail_assistant.config.settings import Settings
from retail_assistant.generation.prompt_templates import (
    SYNTHESIS_PROMPT,
    SYNTHESIS_SYSTEM,
    format_capability_block,
)
from retail_assistant.models.domain import ConversationStep
from retail_assistant.observability.logger import get_logger
from retail_assistant.protocols.llm import LanguageModel

logger = get_logger("synthesis")


@dataclass(frozen=True)
class Synthesis:
    content: str
    reasoning: str
    confidence: float


class Synthesizer:
    """Single output: wrapped without a model call. Several: one model call,
    falling back to concatenation when the model fails."""

    def __init__(self, llm: LanguageModel, settings: Settings) -> None:
        self._llm = llm
        self._fallback_confidence = settings.synthesis_fallback_confidence

    async def synthesize(self, query: str, steps: list[ConversationStep]) -> Synthesis:
        if not steps:
            raise ValueError("Nothing to synthesize")

        if len(steps) == 1:
            step = steps[0]
            return Synthesis(
                content=SINGLE_CAPABILITY_PREFIX + step.content,
                reasoning=f"Single capability response from {step.role.value}",
                confidence=_confidence(step),
            )

        outputs = [(s.role.value, s.content) for s in steps]
        prompt = SYNTHESIS_PROMPT.format(
            query=query, capability_block=format_capability_block(outputs)
        )
        try:
            text = await self._llm.generate(prompt, system=SYNTHESIS_SYSTEM)
        except Exception as e:
            logger.warning("synthesis_model_failed", error=str(e))
            return Synthesis(
                content=SYNTHESIS_FALLBACK_PREFIX
                + SYNTHESIS_FALLBACK_CONNECTOR.join(s.content for s in steps),
                reasoning="Fallback synthesis by concatenating capability outputs",
                confidence=self._fallback_confidence,
            )

        confidence = sum(_confidence(s) for s in steps) / len(steps)
        return Synthesis(
            content=text.strip(),
            reasoning=f"Synthesized insights from {len(steps)} capabilities",
            confidence=confidence,
        )


def _confidence(step: ConversationStep) -> float:
    return step.metadata.confidence if step.metadata.confidence is not None else 0.0
