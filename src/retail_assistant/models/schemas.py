"""Pydantic models for API serialization and structured model output."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from retail_assistant.models.domain import ConversationStep, QueryResult


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Structured model output -------------------------------------------------


class DelegationDecision(BaseModel):
    thought: str = ""
    action: Literal["knowledge", "query", "both"]
    reasoning: str = ""
    confidence: float = Field(default=0.8, ge=0.0, le=1.0)


class SafetyClassification(BaseModel):
    safe: bool
    score: float = Field(ge=0.0, le=1.0)
    issues: list[str] = Field(default_factory=list)


# --- API ---------------------------------------------------------------------


class QueryRequest(BaseModel):
    query: str = Field(min_length=1)


class FieldSchemaOut(CamelModel):
    name: str
    type: str
    mode: str


class QueryResultOut(CamelModel):
    rows: list[dict[str, Any]]
    field_schema: list[FieldSchemaOut]
    row_count: int
    elapsed_ms: float

    @classmethod
    def from_domain(cls, result: QueryResult) -> QueryResultOut:
        return cls(
            rows=result.rows,
            field_schema=[
                FieldSchemaOut(name=f.name, type=f.type, mode=f.mode)
                for f in result.field_schema
            ],
            row_count=result.row_count,
            elapsed_ms=round(result.elapsed_ms, 2),
        )


class StepMetadataOut(CamelModel):
    reasoning: str | None = None
    tool_used: str | None = None
    confidence: float | None = None
    sources: list[str] = Field(default_factory=list)
    sql_query: str | None = None
    safety_score: float | None = None
    delegation_plan: list[str] | None = None
    query_result: QueryResultOut | None = None
    using_live_data: bool | None = None


class ConversationStepOut(CamelModel):
    id: str
    role: Literal["user", "orchestrator", "knowledge", "query", "synthesis", "safety"]
    content: str
    timestamp: datetime
    metadata: StepMetadataOut

    @classmethod
    def from_domain(cls, step: ConversationStep) -> ConversationStepOut:
        meta = step.metadata
        return cls(
            id=step.id,
            role=step.role.value,
            content=step.content,
            timestamp=step.timestamp,
            metadata=StepMetadataOut(
                reasoning=meta.reasoning,
                tool_used=meta.tool_used,
                confidence=meta.confidence,
                sources=list(meta.sources),
                sql_query=meta.sql_query,
                safety_score=meta.safety_score,
                delegation_plan=(
                    list(meta.delegation_plan)
                    if meta.delegation_plan is not None
                    else None
                ),
                query_result=(
                    QueryResultOut.from_domain(meta.query_result)
                    if meta.query_result is not None
                    else None
                ),
                using_live_data=meta.using_live_data,
            ),
        )


class QueryResponse(CamelModel):
    steps: list[ConversationStepOut]


class HealthResponse(BaseModel):
    status: str
    live_data: bool
    llm_configured: bool
