"""Query endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from retail_assistant.api.dependencies import get_orchestrator
from retail_assistant.exceptions import RetailAssistantError
from retail_assistant.models.schemas import ConversationStepOut, QueryRequest, QueryResponse
from retail_assistant.orchestration.orchestrator import Orchestrator

router = APIRouter()


@router.post("/query", response_model=QueryResponse, response_model_by_alias=True)
async def query(
    request: QueryRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> QueryResponse:
    try:
        steps = await orchestrator.process_query(request.query)
    except RetailAssistantError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return QueryResponse(steps=[ConversationStepOut.from_domain(s) for s in steps])
