"""Core domain objects used throughout the system."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from retail_assistant.exceptions import ErrorCategory, InvariantViolation


class StepRole(str, Enum):
    USER = "user"
    ORCHESTRATOR = "orchestrator"
    KNOWLEDGE = "knowledge"
    QUERY = "query"
    SYNTHESIS = "synthesis"
    SAFETY = "safety"


class Capability(str, Enum):
    KNOWLEDGE = "knowledge"
    QUERY = "query"


class CapabilityStatus(str, Enum):
    OK = "ok"
    FALLBACK = "fallback"
    ERROR = "error"


@dataclass(frozen=True)
class DelegationPlan:
    capabilities: tuple[Capability, ...] = ()

    def __post_init__(self) -> None:
        if len(set(self.capabilities)) != len(self.capabilities):
            raise ValueError(f"Duplicate capability in plan: {self.capabilities}")
        for cap in self.capabilities:
            if not isinstance(cap, Capability):
                raise ValueError(f"Unknown capability: {cap!r}")

    @classmethod
    def both(cls) -> DelegationPlan:
        return cls((Capability.KNOWLEDGE, Capability.QUERY))

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(c.value for c in self.capabilities)

    def __len__(self) -> int:
        return len(self.capabilities)

    def __iter__(self):
        return iter(self.capabilities)


@dataclass(frozen=True)
class SafetyVerdict:
    safe: bool
    score: float
    issues: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class FieldSchema:
    name: str
    type: str
    mode: str = "NULLABLE"  # "NULLABLE" or "REQUIRED"


@dataclass(frozen=True)
class QueryResult:
    rows: list[dict[str, Any]]
    field_schema: list[FieldSchema]
    row_count: int
    elapsed_ms: float

    def __post_init__(self) -> None:
        if self.row_count != len(self.rows):
            raise InvariantViolation(
                f"row_count={self.row_count} but {len(self.rows)} rows present"
            )
        names = [f.name for f in self.field_schema]
        if len(set(names)) != len(names):
            raise InvariantViolation(f"Duplicate field names in schema: {names}")
        known = set(names)
        for row in self.rows:
            extra = set(row) - known
            if extra:
                raise InvariantViolation(f"Row keys not in field schema: {sorted(extra)}")

    @classmethod
    def from_rows(
        cls,
        rows: list[dict[str, Any]],
        field_schema: list[FieldSchema],
        elapsed_ms: float = 0.0,
    ) -> QueryResult:
        return cls(
            rows=rows,
            field_schema=field_schema,
            row_count=len(rows),
            elapsed_ms=elapsed_ms,
        )


@dataclass(frozen=True)
class QueryBudget:
    max_bytes_billed: int
    timeout_ms: int


@dataclass(frozen=True)
class TableSchema:
    name: str
    fields: list[FieldSchema]
    row_count: int | None = None
    sample_rows: list[dict[str, Any]] = field(default_factory=list)
    sample_unavailable: bool = False


@dataclass(frozen=True)
class SchemaDescriptor:
    text: str
    tables: list[TableSchema] = field(default_factory=list)


@dataclass(frozen=True)
class StepMetadata:
    reasoning: str | None = None
    tool_used: str | None = None
    confidence: float | None = None
    sources: tuple[str, ...] = ()
    sql_query: str | None = None
    safety_score: float | None = None
    delegation_plan: tuple[str, ...] | None = None
    query_result: QueryResult | None = None
    using_live_data: bool | None = None


@dataclass(frozen=True)
class ConversationStep:
    id: str
    role: StepRole
    content: str
    timestamp: datetime
    metadata: StepMetadata = field(default_factory=StepMetadata)


@dataclass
class KnowledgeAnswer:
    message: str
    reasoning: str
    confidence: float
    sources: list[str]
    status: CapabilityStatus


@dataclass
class QueryAnswer:
    message: str
    reasoning: str
    confidence: float
    sql_query: str | None
    result: QueryResult
    using_live_data: bool
    status: CapabilityStatus
    error_category: ErrorCategory | None = None
