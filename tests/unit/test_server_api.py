"""API tests for the HTTP and WebSocket surfaces."""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path
from unittest.mock import Mock

import requests
from fastapi.testclient import TestClient

from rephrase_ai.config import RephraseSettings
from rephrase_ai.llm.errors import ProviderRemoteError
from rephrase_ai.llm.gemini_provider import GeminiProvider
from rephrase_ai.server.app import create_app


def test_health(settings: RephraseSettings, stub_provider) -> None:
    client = TestClient(create_app(settings, provider=stub_provider))

    health = client.get("/api/health").json()
    assert health["status"] == "ok"
    assert "version" in health


def test_humanize_end_to_end(settings: RephraseSettings, stub_provider) -> None:
    stub_provider.replies.append("Greetings, everyone.")
    app = create_app(settings, provider=stub_provider)
    client = TestClient(app)

    resp = client.post(
        "/api/process",
        json={"text": "hello world", "action": "humanize", "tone": "formal", "complexity": "general"},
    )

    assert resp.status_code == 200
    assert resp.json() == {"result_type": "humanize", "text": "Greetings, everyone."}
    assert app.state.counter.snapshot().humanize_count == 1


def test_humanize_end_to_end_through_gemini_transport(settings: RephraseSettings) -> None:
    class _Response:
        status_code = 200
        text = ""

        def json(self) -> dict[str, object]:
            return {
                "candidates": [
                    {
                        "finishReason": "STOP",
                        "content": {"parts": [{"text": "Greetings, everyone."}]},
                    }
                ]
            }

    session = Mock(spec=requests.Session)
    session.headers = {}
    session.post.return_value = _Response()

    provider = GeminiProvider(settings, session=session)
    client = TestClient(create_app(settings, provider=provider))

    resp = client.post(
        "/api/process",
        json={"text": "hello world", "action": "humanize", "tone": "formal", "complexity": "general"},
    )

    assert resp.status_code == 200
    assert resp.json() == {"result_type": "humanize", "text": "Greetings, everyone."}
    session.post.assert_called_once()
    assert session.headers["x-goog-api-key"] == "test-key"


def test_detect_response_shape(settings: RephraseSettings, stub_provider) -> None:
    stub_provider.replies.append(
        '```json\n{"overall_score":42,"analysis":"Mixed signals.","red_flags":[]}\n```'
    )
    client = TestClient(create_app(settings, provider=stub_provider))

    resp = client.post("/api/process", json={"text": "Some text.", "action": "detect"})

    assert resp.status_code == 200
    assert resp.json() == {
        "result_type": "detect",
        "detection_result": {"overall_score": 42, "analysis": "Mixed signals.", "red_flags": []},
    }


def test_empty_research_topic_is_400(settings: RephraseSettings, stub_provider) -> None:
    app = create_app(settings, provider=stub_provider)
    client = TestClient(app)

    resp = client.post("/api/process", json={"text": "", "action": "research"})

    assert resp.status_code == 400
    assert resp.json()["error"]
    assert app.state.counter.snapshot().research_count == 0


def test_over_limit_text_is_400_and_not_dispatched(
    settings: RephraseSettings, stub_provider
) -> None:
    app = create_app(settings, provider=stub_provider)
    client = TestClient(app)

    resp = client.post("/api/process", json={"text": "word " * 201, "action": "detect"})

    assert resp.status_code == 400
    assert "200-word limit" in resp.json()["error"]
    assert stub_provider.calls == []
    assert app.state.counter.snapshot().detect_count == 0


def test_unknown_action_is_400(settings: RephraseSettings, stub_provider) -> None:
    client = TestClient(create_app(settings, provider=stub_provider))

    resp = client.post("/api/process", json={"text": "hi", "action": "translate"})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid action specified"


def test_malformed_json_is_400(settings: RephraseSettings, stub_provider) -> None:
    client = TestClient(create_app(settings, provider=stub_provider))

    resp = client.post(
        "/api/process",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 400
    assert resp.json() == {"result_type": "", "error": "Invalid JSON payload"}


def test_json_body_is_decoded_whatever_the_content_type(
    settings: RephraseSettings, stub_provider
) -> None:
    stub_provider.replies.append("Hello there.")
    client = TestClient(create_app(settings, provider=stub_provider))

    resp = client.post(
        "/api/process",
        content=b'{"text":"hi","action":"humanize"}',
        headers={"Content-Type": "text/plain"},
    )

    assert resp.status_code == 200
    assert resp.json() == {"result_type": "humanize", "text": "Hello there."}


def test_empty_body_is_400(settings: RephraseSettings, stub_provider) -> None:
    client = TestClient(create_app(settings, provider=stub_provider))

    resp = client.post("/api/process")

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid JSON payload"


def test_wrong_method_is_405(settings: RephraseSettings, stub_provider) -> None:
    client = TestClient(create_app(settings, provider=stub_provider))

    resp = client.get("/api/process")

    assert resp.status_code == 405
    assert resp.json()["error"] == "Invalid request method"


def test_provider_failure_is_500(settings: RephraseSettings, stub_provider) -> None:
    stub_provider.replies.append(ProviderRemoteError(400, "API key not valid"))
    client = TestClient(create_app(settings, provider=stub_provider))

    resp = client.post("/api/process", json={"text": "hello", "action": "humanize"})

    assert resp.status_code == 500
    assert "API key not valid" in resp.json()["error"]


def test_malformed_structured_reply_is_500_without_raw_text(
    settings: RephraseSettings, stub_provider
) -> None:
    stub_provider.replies.append("INTERNAL: definitely not json")
    client = TestClient(create_app(settings, provider=stub_provider))

    resp = client.post("/api/process", json={"text": "hello", "action": "plagiarize"})

    assert resp.status_code == 500
    error = resp.json()["error"]
    assert error
    assert "INTERNAL" not in error


def test_websocket_receives_snapshot_on_connect(
    make_settings: Callable[..., RephraseSettings], stub_provider
) -> None:
    settings = make_settings(REPHRASE_STATS_INTERVAL_SECONDS="60")
    stub_provider.replies.append("Rewritten.")
    app = create_app(settings, provider=stub_provider)

    with TestClient(app) as client:
        client.post("/api/process", json={"text": "hello", "action": "humanize"})

        with client.websocket_connect("/ws") as ws:
            message = ws.receive_json()

    assert message == {
        "type": "stats",
        "humanize_count": 1,
        "detect_count": 0,
        "plagiarize_count": 0,
        "research_count": 0,
    }


def test_static_web_root_is_served(
    make_settings: Callable[..., RephraseSettings], stub_provider, tmp_path: Path
) -> None:
    web_root = tmp_path / "web"
    web_root.mkdir()
    (web_root / "index.html").write_text("<h1>Rephrase</h1>", encoding="utf-8")
    settings = make_settings(REPHRASE_WEB_ROOT=str(web_root))
    client = TestClient(create_app(settings, provider=stub_provider))

    assert "Rephrase" in client.get("/").text
    assert client.get("/api/process").status_code == 405


def test_head_and_options_are_405_with_web_root_mounted(
    make_settings: Callable[..., RephraseSettings], stub_provider, tmp_path: Path
) -> None:
    web_root = tmp_path / "web"
    web_root.mkdir()
    (web_root / "index.html").write_text("<h1>Rephrase</h1>", encoding="utf-8")
    settings = make_settings(REPHRASE_WEB_ROOT=str(web_root))
    client = TestClient(create_app(settings, provider=stub_provider))

    assert client.head("/api/process").status_code == 405

    resp = client.options("/api/process")
    assert resp.status_code == 405
    assert resp.json() == {"result_type": "", "error": "Invalid request method"}


def test_websocket_disconnect_unregisters_listener(
    make_settings: Callable[..., RephraseSettings], stub_provider
) -> None:
    settings = make_settings(REPHRASE_STATS_INTERVAL_SECONDS="60")
    app = create_app(settings, provider=stub_provider)
    hub = app.state.hub

    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            assert hub.listener_count == 1

        deadline = time.monotonic() + 2.0
        while hub.listener_count and time.monotonic() < deadline:
            time.sleep(0.01)

        assert hub.listener_count == 0
