"""Metric recording helpers for traces."""

from __future__ import annotations

from retail_assistant.observability.logger import get_logger

logger = get_logger("metrics")


def log_safety_verdict(stage: str, safe: bool, score: float, issues: list[str]) -> None:
    logger.info(
        "safety_verdict",
        stage=stage,
        safe=safe,
        score=round(score, 4),
        issues=issues,
    )


def log_query_execution(
    using_live_data: bool,
    row_count: int,
    elapsed_ms: float,
    error_category: str | None = None,
) -> None:
    logger.info(
        "query_execution",
        using_live_data=using_live_data,
        row_count=row_count,
        elapsed_ms=round(elapsed_ms, 2),
        error_category=error_category,
    )


def log_orchestration_metrics(
    trace_id: str,
    plan: list[str],
    confidence: float,
    safety_score: float,
    spans: dict[str, float],
    total_ms: float,
) -> None:
    logger.info(
        "orchestration_metrics",
        trace_id=trace_id,
        plan=plan,
        confidence=round(confidence, 4),
        safety_score=round(safety_score, 4),
        spans=spans,
        total_ms=round(total_ms, 2),
    )
