"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from retail_assistant.api.dependencies import get_components
from retail_assistant.models.schemas import HealthResponse
from retail_assistant.orchestration.factory import Components

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(components: Components = Depends(get_components)) -> HealthResponse:
    live = components.backend is not None and await components.backend.test_connection()
    return HealthResponse(
        status="ok" if live else "degraded",
        live_data=live,
        llm_configured=components.llm_configured,
    )
