"""HTTP surface tests driven through FastAPI's TestClient."""

from __future__ import annotations

import base64

import pytest
from fastapi.testclient import TestClient

from book_drafter_providers import MockProvider

from services.orchestrator.app.main import app
from services.orchestrator.app.sessions import SessionRegistry
from services.orchestrator.app.settings import PipelineSettings
from tests.utils.providers import ScriptedProvider


@pytest.fixture
def client():
    app.state.registry = SessionRegistry(PipelineSettings(), provider_builder=lambda override: MockProvider())
    with TestClient(app) as test_client:
        yield test_client


def _ready_session(client: TestClient, chapter_count: int = 5) -> str:
    session_id = client.post("/sessions").json()["session_id"]
    response = client.post(
        f"/sessions/{session_id}/outline",
        json={"topic": "Renewable energy policy", "parameters": {"chapter_count": chapter_count}},
    )
    assert response.status_code == 200
    return session_id


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_new_session_starts_idle(client: TestClient) -> None:
    response = client.post("/sessions")
    assert response.status_code == 201
    body = response.json()
    assert body["state"] == "IDLE"
    assert body["outline"] is None


def test_unknown_session_returns_404(client: TestClient) -> None:
    assert client.get("/sessions/does-not-exist").status_code == 404


def test_outline_then_generate_and_export(client: TestClient) -> None:
    session_id = _ready_session(client)
    session = client.get(f"/sessions/{session_id}").json()
    assert session["state"] == "OUTLINE_READY"
    assert len(session["outline"]["chapters"]) == 5
    assert session["progress"]["total_sections"] == 17

    response = client.post(f"/sessions/{session_id}/generate", params={"wait": "true"})
    assert response.status_code == 200
    body = response.json()
    assert body["state"] == "COMPLETE"
    assert body["progress"]["percentage"] == 100.0
    assert body["book"]["references"]

    html = client.get(f"/sessions/{session_id}/export/html")
    assert html.status_code == 200
    assert html.headers["content-type"].startswith("text/html")
    assert "renewable_energy_policy.html" in html.headers["content-disposition"]

    docx = client.get(f"/sessions/{session_id}/export/docx")
    assert docx.status_code == 200
    assert docx.content[:2] == b"PK"


def test_blank_topic_returns_400_with_localized_message(client: TestClient) -> None:
    session_id = client.post("/sessions").json()["session_id"]
    response = client.post(
        f"/sessions/{session_id}/outline",
        json={"topic": "  ", "parameters": {"output_language": "en"}},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Please enter a topic or an article."


def test_invalid_parameters_return_422(client: TestClient) -> None:
    session_id = client.post("/sessions").json()["session_id"]
    response = client.post(
        f"/sessions/{session_id}/outline",
        json={"topic": "Wind", "parameters": {"chapter_count": 30}},
    )
    assert response.status_code == 422


def test_generate_before_outline_conflicts(client: TestClient) -> None:
    session_id = client.post("/sessions").json()["session_id"]
    assert client.post(f"/sessions/{session_id}/generate").status_code == 409


def test_export_requires_complete_book(client: TestClient) -> None:
    session_id = _ready_session(client)
    assert client.get(f"/sessions/{session_id}/export/html").status_code == 409
    assert client.get(f"/sessions/{session_id}/export/pdf").status_code == 422


def test_section_failure_maps_to_502_and_keeps_outline(client: TestClient) -> None:
    app.state.registry = SessionRegistry(
        PipelineSettings(),
        provider_builder=lambda override: ScriptedProvider(fail_on_section="Section 2.1"),
    )
    session_id = _ready_session(client)

    response = client.post(f"/sessions/{session_id}/generate", params={"wait": "true"})

    assert response.status_code == 502
    session = client.get(f"/sessions/{session_id}").json()
    assert session["state"] == "OUTLINE_READY"
    assert session["error"] == response.json()["detail"]
    assert len(session["book"]["chapters"][0]["content"]) == 3


def test_reset_returns_to_idle(client: TestClient) -> None:
    session_id = _ready_session(client)
    response = client.post(f"/sessions/{session_id}/reset")
    assert response.status_code == 200
    assert response.json()["state"] == "IDLE"
    assert response.json()["outline"] is None


def test_cancel_without_active_run(client: TestClient) -> None:
    session_id = _ready_session(client)
    body = client.post(f"/sessions/{session_id}/cancel").json()
    assert body == {"cancelled": False, "state": "OUTLINE_READY"}


def test_source_material_upload(client: TestClient) -> None:
    content = base64.b64encode("Line one.\nLine two here.".encode("utf-8")).decode("ascii")
    response = client.post(
        "/source-material", json={"filename": "notes.txt", "content_base64": content}
    )
    assert response.status_code == 200
    assert response.json() == {
        "filename": "notes.txt",
        "text": "Line one.\nLine two here.",
        "word_count": 5,
    }


def test_source_material_rejects_invalid_base64(client: TestClient) -> None:
    response = client.post("/source-material", json={"filename": "x.txt", "content_base64": "!!!"})
    assert response.status_code == 400


def test_metrics_endpoint(client: TestClient) -> None:
    client.get("/health")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "book_drafter_http_requests_total" in response.text


def test_delete_session_forgets_it(client: TestClient) -> None:
    session_id = _ready_session(client)
    registry = app.state.registry
    assert len(registry) == 1

    response = client.delete(f"/sessions/{session_id}")

    assert response.status_code == 204
    assert response.content == b""
    assert len(registry) == 0
    assert client.get(f"/sessions/{session_id}").status_code == 404
    assert client.delete(f"/sessions/{session_id}").status_code == 404
