"""Delegation: decide which capabilities handle a query."""

from __future__ import annotations

import re
from dataclasses import dataclass

from retail_assistant.config.constants import (
    KNOWLEDGE_INTENT_KEYWORDS,
    QUERY_INTENT_KEYWORDS,
)
from retail_assistant.generation.prompt_templates import DELEGATION_PROMPT, DELEGATION_SYSTEM
from retail_assistant.generation.structured import request_structured
from retail_assistant.models.domain import Capability, DelegationPlan
from retail_assistant.models.schemas import DelegationDecision
from retail_assistant.observability.logger import get_logger
from retail_assistant.protocols.llm import LanguageModel

logger = get_logger("delegation")

MODEL_TOOL = "delegation_model"
FALLBACK_TOOL = "keyword_fallback"
FALLBACK_CONFIDENCE = 0.6

_ACTION_PLANS: dict[str, tuple[Capability, ...]] = {
    "knowledge": (Capability.KNOWLEDGE,),
    "query": (Capability.QUERY,),
    "both": (Capability.KNOWLEDGE, Capability.QUERY),
}


def _keyword_pattern(keywords: tuple[str, ...]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(k) for k in keywords)
    return re.compile(rf"\b(?:{alternatives})", re.IGNORECASE)


_QUERY_RE = _keyword_pattern(QUERY_INTENT_KEYWORDS)
_KNOWLEDGE_RE = _keyword_pattern(KNOWLEDGE_INTENT_KEYWORDS)


@dataclass(frozen=True)
class Delegation:
    plan: DelegationPlan
    reasoning: str
    confidence: float
    tool_used: str


def keyword_plan(text: str) -> DelegationPlan:
    """Route by intent keywords. Both or neither matching selects both capabilities."""
    wants_query = _QUERY_RE.search(text) is not None
    wants_knowledge = _KNOWLEDGE_RE.search(text) is not None
    if wants_query and not wants_knowledge:
        return DelegationPlan((Capability.QUERY,))
    if wants_knowledge and not wants_query:
        return DelegationPlan((Capability.KNOWLEDGE,))
    return DelegationPlan.both()


class DelegationClassifier:
    def __init__(self, llm: LanguageModel) -> None:
        self._llm = llm

    async def classify(self, text: str) -> Delegation:
        try:
            decision = await request_structured(
                self._llm,
                DELEGATION_PROMPT.format(query=text),
                DelegationDecision,
                system=DELEGATION_SYSTEM,
            )
        except Exception as e:
            plan = keyword_plan(text)
            logger.warning("delegation_model_unavailable", error=str(e), plan=list(plan.names))
            return Delegation(
                plan=plan,
                reasoning="Keyword-based routing used because the delegation model was unavailable",
                confidence=FALLBACK_CONFIDENCE,
                tool_used=FALLBACK_TOOL,
            )

        plan = DelegationPlan(_ACTION_PLANS[decision.action])
        logger.info("delegation_decided", plan=list(plan.names), confidence=decision.confidence)
        return Delegation(
            plan=plan,
            reasoning=decision.reasoning or decision.thought or f"Delegated to {decision.action}",
            confidence=decision.confidence,
            tool_used=MODEL_TOOL,
        )
