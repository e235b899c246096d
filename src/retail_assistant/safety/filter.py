"""Input and output safety checks.

The remote classifier fails open: an outage returns a safe verdict with a
reduced score. Answers are additionally screened with a deterministic rule
table that does not depend on the classifier.
"""

from __future__ import annotations

import re

from retail_assistant.config.constants import RESPONSE_DISALLOW_RULES
from retail_assistant.config.settings import Settings
from retail_assistant.generation.prompt_templates import (
    QUERY_SAFETY_PROMPT,
    RESPONSE_SAFETY_PROMPT,
    SAFETY_SYSTEM,
)
from retail_assistant.generation.structured import request_structured
from retail_assistant.models.domain import SafetyVerdict
from retail_assistant.models.schemas import SafetyClassification
from retail_assistant.observability.logger import get_logger
from retail_assistant.observability.metrics import log_safety_verdict
from retail_assistant.protocols.llm import LanguageModel

logger = get_logger("safety")

_COMPILED_RULES: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(pattern, re.IGNORECASE), label)
    for pattern, label in RESPONSE_DISALLOW_RULES
)


def match_disallowed_patterns(text: str) -> list[str]:
    """Return the labels of every response rule that matches, in table order."""
    return [label for pattern, label in _COMPILED_RULES if pattern.search(text)]


class SafetyFilter:
    def __init__(self, llm: LanguageModel, settings: Settings) -> None:
        self._llm = llm
        self._pass_threshold = settings.safety_pass_threshold
        self._fail_open_score = settings.safety_fail_open_score
        self._penalty = settings.safety_pattern_penalty

    async def check_query(self, text: str) -> SafetyVerdict:
        classification = await self._classify(QUERY_SAFETY_PROMPT, text, stage="query")
        verdict = self._decide(classification.safe, classification.score, list(classification.issues))
        log_safety_verdict("query", verdict.safe, verdict.score, verdict.issues)
        return verdict

    async def check_response(self, text: str) -> SafetyVerdict:
        classification = await self._classify(RESPONSE_SAFETY_PROMPT, text, stage="response")
        issues = list(classification.issues)
        score = classification.score

        matched = match_disallowed_patterns(text)
        for label in matched:
            score -= self._penalty
            issues.append(label)

        verdict = self._decide(classification.safe, score, issues)
        log_safety_verdict("response", verdict.safe, verdict.score, verdict.issues)
        return verdict

    async def _classify(self, template: str, text: str, stage: str) -> SafetyClassification:
        prompt = template.format(text=text)
        try:
            return await request_structured(
                self._llm, prompt, SafetyClassification, system=SAFETY_SYSTEM
            )
        except Exception as e:
            logger.warning("safety_classifier_unavailable", stage=stage, error=str(e))
            return SafetyClassification(safe=True, score=self._fail_open_score, issues=[])

    def _decide(self, classifier_safe: bool, score: float, issues: list[str]) -> SafetyVerdict:
        score = max(0.0, min(1.0, score))
        if not classifier_safe:
            safe = False
            if not issues:
                issues = ["flagged by safety classifier"]
        else:
            safe = not issues or score >= self._pass_threshold
        return SafetyVerdict(safe=safe, score=score, issues=issues)
