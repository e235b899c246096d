"""Per-request conversation trace."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from retail_assistant.models.domain import ConversationStep, StepMetadata, StepRole


class ConversationRecorder:
    """Creates steps with unique ids and non-decreasing timestamps.

    Owned by a single ``process_query`` call; the step list is handed back to
    the caller and the recorder is discarded.
    """

    def __init__(self) -> None:
        self._steps: list[ConversationStep] = []
        self._last: datetime | None = None

    def record(
        self,
        role: StepRole,
        content: str,
        metadata: StepMetadata | None = None,
    ) -> ConversationStep:
        now = datetime.now(timezone.utc)
        if self._last is not None and now < self._last:
            now = self._last
        self._last = now

        step = ConversationStep(
            id=str(uuid4()),
            role=role,
            content=content,
            timestamp=now,
            metadata=metadata or StepMetadata(),
        )
        self._steps.append(step)
        return step

    @property
    def steps(self) -> list[ConversationStep]:
        return list(self._steps)
