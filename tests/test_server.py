"""Tests for quipsync/server.py."""

import json

import pytest
from fastapi.testclient import TestClient

from quipsync import server
from quipsync.errors import ExtractError, GatewayError
from quipsync.llm_backend import DEFAULT_MODEL
from quipsync.server import create_app
from quipsync.store import JSONLStyleStore

_DESCRIPTION = "Warm, quick-witted morning host"
_SAMPLES = ["Good morning, early birds! " * 3, "That was a classic, and so is this next story. " * 2]


def _client(app_config, gateway=None, store=None) -> TestClient:
    return TestClient(create_app(app_config, gateway=gateway, store=store))


# ---------------------------------------------------------------------------
# /health
# ---------------------------------------------------------------------------

class TestHealth:

    def test_health(self, app_config):
        response = _client(app_config).get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "model": DEFAULT_MODEL}

    def test_lifespan_without_key(self, app_config):
        config = app_config.with_overrides({"anthropic": {"api_key": ""}})
        with _client(config) as client:
            assert client.get("/health").status_code == 200
            assert client.app.state.gateway is None

    def test_module_app_built_once(self, monkeypatch):
        built = []

        def fake_create_app():
            built.append(object())
            return built[-1]

        monkeypatch.setattr(server, "_app", None)
        monkeypatch.setattr(server, "create_app", fake_create_app)
        first = server.app
        assert server.app is first
        assert len(built) == 1

    def test_unknown_attribute(self):
        with pytest.raises(AttributeError):
            server.not_a_thing

    def test_cors(self, app_config):
        response = _client(app_config).get("/health", headers={"Origin": "https://form.example.com"})
        assert response.headers["access-control-allow-origin"] in ("*", "https://form.example.com")


# ---------------------------------------------------------------------------
# /api/complete-json
# ---------------------------------------------------------------------------

class TestCompleteJson:

    def test_script(self, app_config, gateway_factory, bundle_doc, bundle_json):
        gateway = gateway_factory(bundle_json)
        response = _client(app_config, gateway).post(
            "/api/complete-json", json={"mode": "script", "prompt": "Story + song", "style": "dramatic"},
        )
        assert response.status_code == 200
        assert response.json() == {"ok": True, "data": bundle_doc}
        assert len(gateway.calls) == 1
        assert gateway.calls[0]["temperature"] == 0.8
        assert gateway.calls[0]["max_tokens"] == 1800
        assert gateway.calls[0]["model"] == DEFAULT_MODEL

    def test_style(self, app_config, gateway_factory, profile_doc):
        gateway = gateway_factory("not json", json.dumps(profile_doc))
        response = _client(app_config, gateway).post(
            "/api/complete-json", json={"mode": "style", "prompt": "Describe my voice"},
        )
        assert response.status_code == 200
        assert response.json()["data"] == profile_doc
        assert len(gateway.calls) == 2
        assert gateway.calls[0]["temperature"] == 0.5
        assert gateway.calls[0]["max_tokens"] == 1200

    @pytest.mark.parametrize("body, error", [
        ({"mode": "poem", "prompt": "x"}, 'Invalid mode (use "script" or "style")'),
        ({"prompt": "x"}, 'Invalid mode (use "script" or "style")'),
        ({"mode": "script"}, "Missing prompt"),
        ({"mode": "script", "prompt": "   "}, "Missing prompt"),
    ])
    def test_bad_input(self, app_config, gateway_factory, body, error):
        gateway = gateway_factory("unused")
        response = _client(app_config, gateway).post("/api/complete-json", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": error}
        assert gateway.calls == []

    def test_body_not_json(self, app_config, gateway_factory):
        response = _client(app_config, gateway_factory()).post(
            "/api/complete-json", content=b"mode=script", headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400

    def test_missing_key(self, app_config):
        config = app_config.with_overrides({"anthropic": {"api_key": ""}})
        response = _client(config).post("/api/complete-json", json={"mode": "script", "prompt": "x"})
        assert response.status_code == 500
        assert response.json() == {"error": "Server missing ANTHROPIC_API_KEY"}

    def test_exhaustion(self, app_config, gateway_factory):
        gateway = gateway_factory("not json " * 300)
        response = _client(app_config, gateway).post("/api/complete-json", json={"mode": "script", "prompt": "x"})
        assert response.status_code == 502
        body = response.json()
        assert body["error"] == "LLM JSON endpoint failed"
        assert "after 3 attempt(s)" in body["detail"]
        assert len(body["detail"]) <= 800
        assert len(gateway.calls) == 3

    def test_gateway_error(self, app_config, gateway_factory):
        gateway = gateway_factory(GatewayError("Anthropic API error 529: overloaded", status_code=529))
        response = _client(app_config, gateway).post("/api/complete-json", json={"mode": "script", "prompt": "x"})
        assert response.status_code == 503
        assert response.json() == {"error": "LLM JSON endpoint failed", "detail": "Anthropic API error 529: overloaded"}
        assert len(gateway.calls) == 1


# ---------------------------------------------------------------------------
# /api/extract
# ---------------------------------------------------------------------------

class TestExtract:

    def test_invalid_url(self, app_config):
        response = _client(app_config).post("/api/extract", json={"url": "file:///etc/passwd"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid URL"}

    def test_missing_url(self, app_config):
        assert _client(app_config).post("/api/extract", json={}).status_code == 400

    def test_success_is_capped(self, app_config, monkeypatch):
        async def fake_extract(url, **kwargs):
            return "word " * 2000

        monkeypatch.setattr(server, "extract", fake_extract)
        response = _client(app_config).post("/api/extract", json={"url": "https://news.example.com/a"})
        assert response.status_code == 200
        assert len(response.json()["text"]) == 4000

    def test_fetch_failure(self, app_config, monkeypatch):
        async def fake_extract(url, **kwargs):
            raise ExtractError("HTTP 404 for https://news.example.com/a")

        monkeypatch.setattr(server, "extract", fake_extract)
        response = _client(app_config).post("/api/extract", json={"url": "https://news.example.com/a"})
        assert response.status_code == 502
        assert response.json() == {"error": "Extract failed", "detail": "HTTP 404 for https://news.example.com/a"}


# ---------------------------------------------------------------------------
# /api/style-create, /api/style-list
# ---------------------------------------------------------------------------

class TestStyles:

    def test_create_then_list(self, app_config, gateway_factory, profile_doc):
        gateway = gateway_factory(json.dumps(profile_doc))
        client = _client(app_config, gateway)

        assert client.get("/api/style-list").json() == {"ok": True, "personal": []}

        response = client.post("/api/style-create", json={"description": _DESCRIPTION, "samples": _SAMPLES})
        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["style"]["description"] == _DESCRIPTION
        assert body["style"]["analysis"] == profile_doc
        assert gateway.calls[0]["temperature"] == 0.6

        listed = client.get("/api/style-list").json()
        assert listed == {"ok": True, "personal": [body["style"]]}

    @pytest.mark.parametrize("body", [
        {"description": "short", "samples": _SAMPLES},
        {"description": _DESCRIPTION, "samples": []},
        {"description": _DESCRIPTION, "samples": ["too short"]},
        {"description": _DESCRIPTION, "samples": _SAMPLES * 3},
        {"samples": _SAMPLES},
    ])
    def test_invalid_body(self, app_config, gateway_factory, body):
        gateway = gateway_factory("unused")
        response = _client(app_config, gateway).post("/api/style-create", json=body)
        assert response.status_code == 400
        assert response.json()["error"] == "style-create failed"
        assert gateway.calls == []

    def test_insert_failure(self, app_config, gateway_factory, profile_doc, tmp_path):
        gateway = gateway_factory(json.dumps(profile_doc))
        client = _client(app_config, gateway, store=JSONLStyleStore(tmp_path))
        response = client.post("/api/style-create", json={"description": _DESCRIPTION, "samples": _SAMPLES})
        assert response.status_code == 500
        assert response.json() == {"error": "DB insert failed"}

    def test_analysis_failure(self, app_config, gateway_factory):
        client = _client(app_config, gateway_factory("not json"))
        response = client.post("/api/style-create", json={"description": _DESCRIPTION, "samples": _SAMPLES})
        assert response.status_code == 502
        assert response.json()["error"] == "style-create failed"

    def test_unexpected_failure_keeps_error_shape(self, app_config, gateway_factory):
        client = _client(app_config, gateway_factory(RuntimeError("boom")))
        response = client.post("/api/style-create", json={"description": _DESCRIPTION, "samples": _SAMPLES})
        assert response.status_code == 500
        assert response.json() == {"error": "style-create failed", "detail": "boom"}

    def test_read_failure(self, app_config, tmp_path):
        client = _client(app_config, store=JSONLStyleStore(tmp_path))
        response = client.get("/api/style-list")
        assert response.status_code == 500
        assert response.json() == {"error": "DB read failed"}
