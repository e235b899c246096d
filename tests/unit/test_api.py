"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from retail_assistant.api.app import create_app
from retail_assistant.api.dependencies import get_orchestrator
from retail_assistant.exceptions import InvariantViolation
from retail_assistant.orchestration.factory import build_orchestrator
from tests.fakes import SQL, FakeBackend, FakeLanguageModel, FakeSchemaProvider


def _app(settings, backend):
    # The lifespan does not run outside a TestClient context, so wire state directly.
    app = create_app()
    llm = FakeLanguageModel(replies={SQL: "SQL_QUERY: SELECT category, total_sales FROM sales"})
    app.state.components = build_orchestrator(
        settings, llm=llm, backend=backend, schema_provider=FakeSchemaProvider()
    )
    app.state.settings = settings
    return app


@pytest.fixture
def client(settings):
    return TestClient(_app(settings, FakeBackend()))


def test_query_returns_camel_case_trace(client):
    response = client.post("/query", json={"query": "What were our total sales last quarter?"})
    assert response.status_code == 200
    assert "X-Request-ID" in response.headers

    steps = response.json()["steps"]
    assert [s["role"] for s in steps] == ["user", "orchestrator", "query", "synthesis"]
    assert steps[1]["metadata"]["delegationPlan"] == ["query"]
    query_meta = steps[2]["metadata"]
    assert query_meta["sqlQuery"] == "SELECT category, total_sales FROM sales"
    assert query_meta["usingLiveData"] is True
    assert query_meta["queryResult"]["rowCount"] == 1
    assert steps[3]["metadata"]["toolUsed"] == "synthesis:query"


def test_empty_query_rejected(client):
    response = client.post("/query", json={"query": ""})
    assert response.status_code == 422


def test_health_live(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "live_data": True, "llm_configured": True}


def test_health_without_backend(settings):
    settings = settings.model_copy(update={"data_backend": "none"})
    app = create_app()
    app.state.components = build_orchestrator(settings)
    body = TestClient(app).get("/health").json()
    assert body == {"status": "degraded", "live_data": False, "llm_configured": False}


class BrokenOrchestrator:
    async def process_query(self, text):
        raise InvariantViolation("row_count=2 but 1 rows present")


def test_defect_maps_to_500(settings):
    app = _app(settings, FakeBackend())
    app.dependency_overrides[get_orchestrator] = lambda: BrokenOrchestrator()
    response = TestClient(app).post("/query", json={"query": "q"})
    assert response.status_code == 500
    assert "row_count" in response.json()["detail"]
