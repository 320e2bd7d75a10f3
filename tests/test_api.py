"""
API endpoint tests.

Uses FastAPI TestClient for in-process testing.
"""
import pytest
from fastapi.testclient import TestClient

from conftest import CharacterEnvelope, UserEnvelope


@pytest.fixture
def client(monkeypatch):
    """Test client with auth disabled (no API_KEY configured)."""
    from llmjson.api import app

    monkeypatch.delenv("API_KEY", raising=False)
    return TestClient(app)


# --- Health endpoint ---

class TestHealth:
    def test_returns_200(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200

    def test_response_fields(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["modes"] == ["parse", "repair"]
        assert "version" in data

    def test_health_requires_no_auth(self, client, monkeypatch):
        monkeypatch.setenv("API_KEY", "secret-key")
        resp = client.get("/health")
        assert resp.status_code == 200


# --- Parse endpoint ---

class TestParse:
    def test_parse_mode(self, client):
        resp = client.post("/parse", json={"text": 'Sure: {"name": "John"} bye'})
        assert resp.status_code == 200
        data = resp.json()
        assert data["result"] == {"name": "John"}
        assert data["mode"] == "parse"
        assert data["reconciled"] is False

    def test_repair_mode(self, client):
        resp = client.post("/parse", json={"text": 'Sure! {name: "John", age: 30,}', "mode": "repair"})
        assert resp.status_code == 200
        assert resp.json()["result"] == {"name": "John", "age": 30}

    def test_repair_with_schema_renames(self, client):
        resp = client.post("/parse", json={
            "text": '{"person": {"name": "John", "age": 30, "favoriteBand": "Beatles"}}',
            "mode": "repair",
            "schema": CharacterEnvelope.model_json_schema(),
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["result"] == {"character": {"name": "John", "age": 30, "favoriteBand": "Beatles"}}
        assert data["reconciled"] is True

    def test_schema_ignored_in_parse_mode(self, client):
        resp = client.post("/parse", json={
            "text": '{"name": "John", "age": 30}',
            "schema": UserEnvelope.model_json_schema(),
        })
        assert resp.status_code == 200
        assert resp.json()["result"] == {"name": "John", "age": 30}

    def test_no_json_found(self, client):
        resp = client.post("/parse", json={"text": "no json here"})
        assert resp.status_code == 422
        data = resp.json()
        assert data["error"] == "no_json_found"
        assert data["attempts"] is None

    def test_parse_failed(self, client):
        resp = client.post("/parse", json={"text": "{name: John}"})
        assert resp.status_code == 422
        data = resp.json()
        assert data["error"] == "parse_failed"
        assert data["attempts"] == 1
        assert data["preview"] == "{name: John}"

    def test_error_preview_truncated(self, client):
        text = "no json " * 50
        data = client.post("/parse", json={"text": text}).json()
        assert data["preview"] == text[:120] + "..."

    def test_unknown_mode_rejected(self, client):
        resp = client.post("/parse", json={"text": "{}", "mode": "fix"})
        assert resp.status_code == 422
        assert "detail" in resp.json()

    def test_unusable_schema(self, client):
        resp = client.post("/parse", json={
            "text": '{"a": 1}',
            "mode": "repair",
            "schema": {"type": "object", "properties": {"a": {"$ref": "#/$defs/Missing"}}},
        })
        assert resp.status_code == 400
        assert "Unusable schema" in resp.json()["detail"]

    @pytest.mark.parametrize("schema", [
        {"type": "object", "properties": []},
        {"type": "object", "properties": {"a": {"type": "object", "properties": {}, "required": 5}}},
        {"type": "object", "properties": {"a": {"$ref": "#/$defs/A"}}, "$defs": "x"},
    ])
    def test_malformed_schema_is_400(self, client, schema):
        resp = client.post("/parse", json={"text": '{"a": 1}', "mode": "repair", "schema": schema})
        assert resp.status_code == 400
        assert "Unusable schema" in resp.json()["detail"]


# --- Inspect endpoint ---

class TestInspect:
    def test_valid_json(self, client):
        resp = client.post("/inspect", json={"text": '{"x": 1}'})
        assert resp.json() == {"has_possible_json": True, "is_json_string": True}

    def test_prose_with_json(self, client):
        resp = client.post("/inspect", json={"text": 'Here: {"x": 1}'})
        assert resp.json() == {"has_possible_json": True, "is_json_string": False}

    def test_plain_text(self, client):
        resp = client.post("/inspect", json={"text": "hello"})
        assert resp.json() == {"has_possible_json": False, "is_json_string": False}


# --- Auth ---

class TestAuth:
    def test_missing_key_rejected(self, client, monkeypatch):
        monkeypatch.setenv("API_KEY", "secret-key")
        resp = client.post("/parse", json={"text": "{}"})
        assert resp.status_code == 401

    def test_wrong_key_rejected(self, client, monkeypatch):
        monkeypatch.setenv("API_KEY", "secret-key")
        resp = client.post("/inspect", json={"text": "{}"}, headers={"X-API-Key": "nope"})
        assert resp.status_code == 401

    def test_correct_key_accepted(self, client, monkeypatch):
        monkeypatch.setenv("API_KEY", "secret-key")
        resp = client.post("/parse", json={"text": "{}"}, headers={"X-API-Key": "secret-key"})
        assert resp.status_code == 200
        assert resp.json()["result"] == {}
