"""Knowledge capability: answers from static retail domain knowledge."""

from __future__ import annotations

from retail_assistant.config.constants import KNOWLEDGE_SOURCES
from retail_assistant.config.settings import Settings
from retail_assistant.generation.prompt_templates import (
    KNOWLEDGE_FALLBACK_MESSAGE,
    KNOWLEDGE_PROMPT,
    KNOWLEDGE_SYSTEM,
)
from retail_assistant.models.domain import CapabilityStatus, KnowledgeAnswer
from retail_assistant.observability.logger import get_logger
from retail_assistant.protocols.llm import LanguageModel

logger = get_logger("knowledge")


class KnowledgeCapability:
    """Best-effort answers; a model failure yields a static fallback, never an error.

    ``sources`` is a fixed illustrative citation list. A retrieval-backed
    implementation would return passage identifiers ranked by relevance.
    """

    def __init__(self, llm: LanguageModel, settings: Settings) -> None:
        self._llm = llm
        self._confidence = settings.knowledge_confidence
        self._fallback_confidence = settings.knowledge_fallback_confidence

    async def process(self, query: str) -> KnowledgeAnswer:
        prompt = KNOWLEDGE_PROMPT.format(query=query)
        try:
            text = await self._llm.generate(prompt, system=KNOWLEDGE_SYSTEM)
        except Exception as e:
            logger.warning("knowledge_generation_failed", error=str(e))
            return KnowledgeAnswer(
                message=KNOWLEDGE_FALLBACK_MESSAGE,
                reasoning="Fallback response due to knowledge base unavailability",
                confidence=self._fallback_confidence,
                sources=[],
                status=CapabilityStatus.FALLBACK,
            )

        logger.info("knowledge_answered", answer_len=len(text))
        return KnowledgeAnswer(
            message=text.strip(),
            reasoning="Retrieved information from retail knowledge base and industry best practices",
            confidence=self._confidence,
            sources=list(KNOWLEDGE_SOURCES),
            status=CapabilityStatus.OK,
        )
