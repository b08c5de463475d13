"""HTTP adapter tests using FastAPI's TestClient."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from genui_engine.adapters.web_fastapi.app import create_app
from genui_engine.engine.service import GenerationService
from genui_engine.providers.mock import ScriptedProvider, ScriptedTurn
from genui_engine.providers.selector import ProviderSelector
from genui_engine.storage.in_memory import InMemoryMessageStore


@pytest.fixture
def client_for(tool_registry, make_selector):
    def _make(provider=None, selector=None):
        service = GenerationService(
            store=InMemoryMessageStore(),
            selector=selector or make_selector(provider),
            tool_registry=tool_registry,
        )
        return TestClient(create_app(service))

    return _make


class TestGenerateEndpoint:
    def test_streams_component_and_persists_history(self, client_for):
        provider = ScriptedProvider([
            ScriptedTurn(["<div>"], [("brave_web_search", '{"query": "weather today"}')]),
            ScriptedTurn(["Weather</div>"]),
        ])

        with client_for(provider) as client:
            resp = client.post("/api/generate", json={
                "prompt": "weather today", "sessionId": "s1", "model": "gemini",
            })
            assert resp.status_code == 200
            assert resp.headers["content-type"].startswith("text/plain")
            assert resp.text == "<div>Weather</div>"

            history = client.get("/api/conversations/s1/messages").json()

        assert [m["role"] for m in history] == ["user", "ai"]
        assert history[0]["content"] == "weather today"
        assert history[1]["componentCode"] == "<div>Weather</div>"
        assert history[1]["sessionId"] == "s1"

    @pytest.mark.parametrize("body", [
        {"sessionId": "s1"},
        {"prompt": "hi"},
        {"prompt": "", "sessionId": "s1"},
    ])
    def test_missing_fields_rejected(self, client_for, body):
        with client_for(ScriptedProvider([])) as client:
            resp = client.post("/api/generate", json=body)

        assert resp.status_code == 400
        assert resp.json()["error"] == "prompt and sessionId are required"

    def test_non_json_body_rejected(self, client_for):
        with client_for(ScriptedProvider([])) as client:
            resp = client.post("/api/generate", content=b"not json",
                               headers={"Content-Type": "application/json"})
        assert resp.status_code == 400

    def test_unconfigured_provider_is_500_and_writes_nothing(self, client_for):
        with client_for(selector=ProviderSelector({})) as client:
            resp = client.post("/api/generate", json={"prompt": "p", "sessionId": "s9"})
            assert resp.status_code == 500
            assert resp.json()["error"] == "Provider is not configured"
            assert "GEMINI_API_KEY" in resp.json()["details"]
            assert client.get("/api/conversations").json() == []

    def test_failure_before_first_fragment_is_502(self, client_for):
        with client_for(ScriptedProvider([ScriptedTurn(error=ConnectionError("reset"))])) as client:
            resp = client.post("/api/generate", json={"prompt": "p", "sessionId": "s2"})
            assert resp.status_code == 502
            assert resp.json()["error"] == "Failed to generate component"

            history = client.get("/api/conversations/s2/messages").json()
        assert [m["role"] for m in history] == ["user"]

    def test_failure_mid_stream_truncates_body(self, client_for):
        with client_for(ScriptedProvider([ScriptedTurn(["<div>", "par"], error=ConnectionError("reset"))])) as client:
            resp = client.post("/api/generate", json={"prompt": "p", "sessionId": "s3"})
            assert resp.status_code == 200
            assert resp.text == "<div>par"

            history = client.get("/api/conversations/s3/messages").json()
        assert [m["role"] for m in history] == ["user"]


class TestConversationEndpoints:
    def _seed(self, client, *session_ids):
        for sid in session_ids:
            client.post("/api/generate", json={"prompt": f"about {sid}", "sessionId": sid})

    def test_list_is_most_recent_first(self, client_for):
        provider = ScriptedProvider([ScriptedTurn(["<a/>"]) for _ in range(3)])
        with client_for(provider) as client:
            self._seed(client, "older", "newer", "older")
            listed = client.get("/api/conversations").json()

        assert [c["id"] for c in listed] == ["older", "newer"]
        assert listed[0]["title"] == "New Conversation"
        assert {"createdAt", "updatedAt"} <= listed[0].keys()

    def test_rename(self, client_for):
        with client_for(ScriptedProvider([ScriptedTurn(["<a/>"])])) as client:
            self._seed(client, "s1")
            resp = client.patch("/api/conversations/s1", json={"title": "Weather board"})
            assert resp.status_code == 200
            assert resp.json()["title"] == "Weather board"
            assert client.get("/api/conversations").json()[0]["title"] == "Weather board"

    def test_rename_unknown_is_404(self, client_for):
        with client_for(ScriptedProvider([])) as client:
            resp = client.patch("/api/conversations/ghost", json={"title": "x"})
        assert resp.status_code == 404

    def test_delete(self, client_for):
        with client_for(ScriptedProvider([ScriptedTurn(["<a/>"])])) as client:
            self._seed(client, "s1")
            assert client.delete("/api/conversations/s1").status_code == 204
            assert client.get("/api/conversations/s1/messages").json() == []
            assert client.get("/api/conversations").json() == []
            assert client.delete("/api/conversations/s1").status_code == 404

    def test_unknown_session_has_empty_history(self, client_for):
        with client_for(ScriptedProvider([])) as client:
            assert client.get("/api/conversations/nobody/messages").json() == []

    def test_health(self, client_for):
        with client_for(ScriptedProvider([])) as client:
            assert client.get("/health").json() == {"status": "ok"}
