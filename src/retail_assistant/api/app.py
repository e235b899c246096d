"""FastAPI application factory with lifespan management."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from retail_assistant.api.middleware import RequestTimingMiddleware
from retail_assistant.api.routes_health import router as health_router
from retail_assistant.api.routes_query import router as query_router
from retail_assistant.config.settings import Settings
from retail_assistant.observability.logger import get_logger, setup_logging
from retail_assistant.orchestration.factory import build_orchestrator

logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()
    setup_logging(json_output=settings.log_json)

    components = build_orchestrator(settings)
    live = components.backend is not None and await components.backend.test_connection()

    app.state.components = components
    app.state.settings = settings

    logger.info(
        "startup_complete",
        data_backend=settings.data_backend,
        live_data=live,
        llm_configured=components.llm_configured,
    )

    yield

    logger.info("shutdown_complete")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Retail Analytics Assistant",
        version="1.0.0",
        description="Agent orchestration engine for retail analytics questions",
        lifespan=lifespan,
    )
    app.add_middleware(RequestTimingMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(query_router, tags=["query"])
    return app
