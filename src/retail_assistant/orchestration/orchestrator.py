"""Orchestrator: safety gate, delegation, concurrent capabilities, synthesis."""

from __future__ import annotations

import asyncio

from retail_assistant.config.constants import COMPLIANCE_REVIEW_MESSAGE
from retail_assistant.config.settings import Settings
from retail_assistant.exceptions import InvariantViolation
from retail_assistant.models.domain import (
    Capability,
    ConversationStep,
    StepMetadata,
    StepRole,
)
from retail_assistant.observability.logger import get_logger
from retail_assistant.observability.metrics import log_orchestration_metrics
from retail_assistant.observability.tracing import TraceContext
from retail_assistant.orchestration.classifier import DelegationClassifier
from retail_assistant.orchestration.recorder import ConversationRecorder
from retail_assistant.orchestration.synthesis import Synthesizer
from retail_assistant.protocols.capability import KnowledgeHandler, QueryHandler
from retail_assistant.safety.filter import SafetyFilter

logger = get_logger("orchestrator")

KNOWLEDGE_TOOL = "knowledge_base"
QUERY_TOOL = "sql_database"
ERROR_TOOL = "capability_error"
TIMEOUT_TOOL = "capability_timeout"

_ROLES = {
    Capability.KNOWLEDGE: StepRole.KNOWLEDGE,
    Capability.QUERY: StepRole.QUERY,
}


class Orchestrator:
    def __init__(
        self,
        safety_filter: SafetyFilter,
        classifier: DelegationClassifier,
        knowledge: KnowledgeHandler,
        query: QueryHandler,
        synthesizer: Synthesizer,
        settings: Settings,
    ) -> None:
        self._safety = safety_filter
        self._classifier = classifier
        self._knowledge = knowledge
        self._query = query
        self._synthesizer = synthesizer
        self._timeout_s = settings.capability_timeout_ms / 1000
        self._degraded_confidence = settings.degraded_confidence

    async def process_query(self, text: str) -> list[ConversationStep]:
        trace = TraceContext()
        recorder = ConversationRecorder()
        recorder.record(StepRole.USER, text)

        # STEP 1: Input safety
        with trace.span("input_safety"):
            verdict = await self._safety.check_query(text)

        if not verdict.safe:
            recorder.record(
                StepRole.SAFETY,
                "Your request could not be processed because it was flagged by the "
                "safety filter: " + "; ".join(verdict.issues),
                StepMetadata(
                    reasoning="Input failed the safety check; no capability was invoked",
                    tool_used="safety_filter",
                    confidence=verdict.score,
                    safety_score=verdict.score,
                    delegation_plan=(),
                ),
            )
            logger.warning("query_rejected", issues=verdict.issues, safety_score=verdict.score)
            log_orchestration_metrics(
                trace.trace_id, [], 0.0, verdict.score, trace.span_durations(), trace.elapsed_ms
            )
            return recorder.steps

        # STEP 2: Classification
        with trace.span("classification"):
            delegation = await self._classifier.classify(text)
        plan = delegation.plan
        recorder.record(
            StepRole.ORCHESTRATOR,
            f"Delegating to: {', '.join(plan.names)}",
            StepMetadata(
                reasoning=delegation.reasoning,
                tool_used=delegation.tool_used,
                confidence=delegation.confidence,
                delegation_plan=plan.names,
            ),
        )

        # STEP 3: Delegation (single join point, plan-order emission)
        with trace.span("delegation", plan=list(plan.names)):
            outcomes = await asyncio.gather(*(self._invoke(cap, text) for cap in plan))
        capability_steps = [
            recorder.record(_ROLES[cap], content, metadata)
            for cap, (content, metadata) in zip(plan, outcomes)
        ]

        # STEP 4: Synthesis
        with trace.span("synthesis"):
            synthesis = await self._synthesizer.synthesize(text, capability_steps)

        # STEP 5: Output safety
        with trace.span("output_safety"):
            response_verdict = await self._safety.check_response(synthesis.content)

        confidence = min(synthesis.confidence, response_verdict.score)
        content = synthesis.content
        if not response_verdict.safe:
            logger.warning(
                "response_withheld",
                issues=response_verdict.issues,
                safety_score=response_verdict.score,
            )
            content = COMPLIANCE_REVIEW_MESSAGE

        sources: list[str] = []
        for step in capability_steps:
            sources.extend(s for s in step.metadata.sources if s not in sources)

        recorder.record(
            StepRole.SYNTHESIS,
            content,
            StepMetadata(
                reasoning=synthesis.reasoning,
                tool_used="synthesis:" + "+".join(plan.names),
                confidence=confidence,
                sources=tuple(sources),
                safety_score=response_verdict.score,
            ),
        )

        log_orchestration_metrics(
            trace.trace_id,
            list(plan.names),
            confidence,
            response_verdict.score,
            trace.span_durations(),
            trace.elapsed_ms,
        )
        return recorder.steps

    async def _invoke(self, capability: Capability, text: str) -> tuple[str, StepMetadata]:
        try:
            if capability is Capability.KNOWLEDGE:
                return await asyncio.wait_for(self._run_knowledge(text), self._timeout_s)
            return await asyncio.wait_for(self._run_query(text), self._timeout_s)
        except InvariantViolation:
            raise
        except asyncio.TimeoutError:
            logger.warning("capability_timeout", capability=capability.value, timeout_s=self._timeout_s)
            return (
                f"The {capability.value} capability did not respond within "
                f"{self._timeout_s:g} seconds, so its contribution is unavailable.",
                StepMetadata(
                    reasoning="Capability timed out",
                    tool_used=TIMEOUT_TOOL,
                    confidence=self._degraded_confidence,
                ),
            )
        except Exception as e:
            logger.error("capability_failed", capability=capability.value, error=str(e))
            return (
                f"The {capability.value} capability ran into a problem, so its "
                "contribution is unavailable for this question.",
                StepMetadata(
                    reasoning="Capability raised an error",
                    tool_used=ERROR_TOOL,
                    confidence=self._degraded_confidence,
                ),
            )

    async def _run_knowledge(self, text: str) -> tuple[str, StepMetadata]:
        answer = await self._knowledge.process(text)
        return answer.message, StepMetadata(
            reasoning=answer.reasoning,
            tool_used=KNOWLEDGE_TOOL,
            confidence=answer.confidence,
            sources=tuple(answer.sources),
        )

    async def _run_query(self, text: str) -> tuple[str, StepMetadata]:
        answer = await self._query.process(text)
        return answer.message, StepMetadata(
            reasoning=answer.reasoning,
            tool_used=QUERY_TOOL,
            confidence=answer.confidence,
            sql_query=answer.sql_query,
            query_result=answer.result,
            using_live_data=answer.using_live_data,
        )
