"""Build the orchestrator object graph from settings."""

from __future__ import annotations

from dataclasses import dataclass

from retail_assistant.capabilities.knowledge import KnowledgeCapability
from retail_assistant.capabilities.query import QueryCapability
from retail_assistant.config.settings import Settings
from retail_assistant.data.schema_cache import SchemaCache
from retail_assistant.data.sqlite_backend import SQLiteBackend, SQLiteSchemaProvider
from retail_assistant.exceptions import ConfigurationError
from retail_assistant.generation.disabled_provider import DisabledLanguageModel
from retail_assistant.generation.gemini_provider import GeminiProvider
from retail_assistant.observability.logger import get_logger
from retail_assistant.orchestration.classifier import DelegationClassifier
from retail_assistant.orchestration.orchestrator import Orchestrator
from retail_assistant.orchestration.synthesis import Synthesizer
from retail_assistant.protocols.data_backend import DataBackend
from retail_assistant.protocols.llm import LanguageModel
from retail_assistant.protocols.schema_provider import SchemaProvider
from retail_assistant.safety.filter import SafetyFilter
from retail_assistant.sql.simulation import SimulatedResultGenerator

logger = get_logger("factory")


@dataclass
class Components:
    orchestrator: Orchestrator
    backend: DataBackend | None
    llm_configured: bool


def build_language_model(settings: Settings) -> LanguageModel:
    if not settings.google_api_key:
        logger.warning("llm_not_configured", fallback="deterministic")
        return DisabledLanguageModel("RETAIL_GOOGLE_API_KEY is not set")
    return GeminiProvider(
        api_key=settings.google_api_key,
        model=settings.gemini_model,
        temperature=settings.gemini_temperature,
        max_tokens=settings.gemini_max_tokens,
    )


def build_data_layer(settings: Settings) -> tuple[DataBackend | None, SchemaProvider | None]:
    if settings.data_backend == "none":
        return None, None

    if settings.data_backend == "sqlite":
        return SQLiteBackend(settings.sqlite_db_path), SQLiteSchemaProvider(settings.sqlite_db_path)

    if not settings.bigquery_project_id:
        raise ConfigurationError("RETAIL_BIGQUERY_PROJECT_ID is required for the bigquery backend")
    try:
        from google.cloud import bigquery

        from retail_assistant.data.bigquery_backend import (
            BigQueryBackend,
            BigQuerySchemaProvider,
        )
    except ImportError as e:
        raise ConfigurationError(
            "google-cloud-bigquery is not installed; install the 'bigquery' extra"
        ) from e

    client = bigquery.Client(project=settings.bigquery_project_id)
    return (
        BigQueryBackend(
            settings.bigquery_project_id,
            settings.bigquery_dataset_id,
            location=settings.bigquery_location,
            client=client,
        ),
        BigQuerySchemaProvider(
            settings.bigquery_project_id,
            settings.bigquery_dataset_id,
            location=settings.bigquery_location,
            client=client,
        ),
    )


def build_orchestrator(
    settings: Settings,
    llm: LanguageModel | None = None,
    backend: DataBackend | None = None,
    schema_provider: SchemaProvider | None = None,
) -> Components:
    """Wire every component. Explicit ``llm``/``backend`` arguments override settings."""
    llm_configured = llm is not None or bool(settings.google_api_key)
    llm = llm or build_language_model(settings)
    if backend is None and schema_provider is None:
        backend, schema_provider = build_data_layer(settings)

    safety_filter = SafetyFilter(llm, settings)
    query = QueryCapability(
        llm=llm,
        backend=backend,
        schema_cache=SchemaCache(schema_provider),
        settings=settings,
        simulator=SimulatedResultGenerator(settings.simulation_seed),
        safety_filter=safety_filter,
    )
    orchestrator = Orchestrator(
        safety_filter=safety_filter,
        classifier=DelegationClassifier(llm),
        knowledge=KnowledgeCapability(llm, settings),
        query=query,
        synthesizer=Synthesizer(llm, settings),
        settings=settings,
    )
    logger.info(
        "orchestrator_built",
        data_backend=settings.data_backend if backend is not None else "none",
        llm_configured=llm_configured,
    )
    return Components(orchestrator=orchestrator, backend=backend, llm_configured=llm_configured)
