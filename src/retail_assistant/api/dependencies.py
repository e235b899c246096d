"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Request

from retail_assistant.orchestration.factory import Components
from retail_assistant.orchestration.orchestrator import Orchestrator


def get_components(request: Request) -> Components:
    return request.app.state.components


def get_orchestrator(request: Request) -> Orchestrator:
    return request.app.state.components.orchestrator
