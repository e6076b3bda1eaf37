"""HTTP surface tests using FastAPI's TestClient over fake upstream sessions."""

import pytest
from fastapi.testclient import TestClient

from bva_sync.api.main import create_app
from tests.fakes import FakeBVASession, connection_error


@pytest.fixture
def client_for(make_service):
    def _client(session):
        return TestClient(create_app(sync_service=make_service(session)))

    return _client


def test_health_reports_upstream_reachability(client_for):
    response = client_for(FakeBVASession()).get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "bva_api": True}


def test_health_when_upstream_is_down(client_for):
    response = client_for(FakeBVASession(healthy=connection_error())).get("/health")
    assert response.status_code == 200
    assert response.json()["bva_api"] is False


def test_sync_status_is_404_before_first_run(client_for):
    response = client_for(FakeBVASession()).get("/sync/status")
    assert response.status_code == 404


def test_sync_then_read_back(client_for):
    client = client_for(FakeBVASession(["23-0001", "23-0002"]))

    response = client.post("/sync", json={"query": "tinnitus", "max_decisions": 10})
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert body["synced"] == 2
    assert body["errors"] == []
    assert body["status"] == "completed"

    status = client.get("/sync/status").json()
    assert status["id"] == "latest"
    assert status["total_decisions"] == 2
    assert status["last_sync_status"] == "completed"

    decision = client.get("/decisions/23-0002")
    assert decision.status_code == 200
    assert decision.json()["citation_number"] == "23-0002"
    assert decision.json()["outcome"] == "Granted"


def test_unknown_decision_is_404(client_for):
    response = client_for(FakeBVASession()).get("/decisions/99-9999")
    assert response.status_code == 404


def test_invalid_sync_options_are_rejected(client_for):
    response = client_for(FakeBVASession()).post("/sync", json={"max_decisions": 0})
    assert response.status_code == 422


def test_fatal_sync_failure_is_502(client_for):
    client = client_for(FakeBVASession(["23-0001"], search_failure=connection_error()))
    response = client.post("/sync", json={})
    assert response.status_code == 502
    detail = response.json()["detail"]
    assert detail["kind"] == "transport"
    assert detail["status_code"] == 0


def test_module_level_app_exposes_every_route():
    from bva_sync.api import main as api_main

    paths = {route.path for route in api_main.app.routes}
    assert {"/health", "/sync", "/sync/status", "/decisions/{citation_number}"} <= paths
