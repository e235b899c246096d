"""Tests for object-graph construction from settings."""

import pytest

from retail_assistant.data.sqlite_backend import SQLiteBackend
from retail_assistant.exceptions import ConfigurationError, GenerationError
from retail_assistant.generation.disabled_provider import DisabledLanguageModel
from retail_assistant.generation.gemini_provider import GeminiProvider
from retail_assistant.orchestration.factory import (
    build_data_layer,
    build_language_model,
    build_orchestrator,
)


def test_no_api_key_disables_model(settings):
    assert isinstance(build_language_model(settings), DisabledLanguageModel)


def test_api_key_selects_gemini(settings):
    settings = settings.model_copy(update={"google_api_key": "test-key"})
    assert isinstance(build_language_model(settings), GeminiProvider)


def test_sqlite_is_default_backend(settings):
    backend, provider = build_data_layer(settings)
    assert isinstance(backend, SQLiteBackend)
    assert backend.dialect == "sqlite"
    assert provider is not None


def test_none_backend(settings):
    settings = settings.model_copy(update={"data_backend": "none"})
    assert build_data_layer(settings) == (None, None)


def test_bigquery_requires_project(settings):
    settings = settings.model_copy(update={"data_backend": "bigquery", "bigquery_project_id": ""})
    with pytest.raises(ConfigurationError):
        build_data_layer(settings)


def test_build_orchestrator_reports_configuration(settings):
    components = build_orchestrator(settings)
    assert components.llm_configured is False
    assert isinstance(components.backend, SQLiteBackend)


async def test_disabled_model_raises():
    with pytest.raises(GenerationError):
        await DisabledLanguageModel().generate("hi")
