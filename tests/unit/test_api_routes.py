from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.routes import get_manager, router
from config.settings import Settings
from services.sessions import LiveSessionManager

BASE = "/api/live-sessions"


@pytest.fixture
def manager(clock):
    mgr = LiveSessionManager(clock_factory=lambda: clock, config=Settings(_env_file=None))
    yield mgr
    mgr.shutdown()


@pytest.fixture
def client(manager) -> TestClient:
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_manager] = lambda: manager
    return TestClient(app)


def _start(client: TestClient, **body) -> str:
    resp = client.post(f"{BASE}/start", json=body)
    assert resp.status_code == 200
    return resp.json()["session"]["session_id"]


def test_start_returns_session_and_empty_coverage(client):
    payload = client.post(f"{BASE}/start", json={"framework_id": "bant"}).json()
    assert payload["session"]["state"] == "live"
    assert payload["coverage"]["percentage"] == 0
    assert [f["key"] for f in payload["coverage"]["per_field"]] == ["budget", "authority", "need", "timeline"]


def test_unknown_framework_404(client):
    assert client.post(f"{BASE}/start", json={"framework_id": "spiced"}).status_code == 404


def test_unknown_session_404(client):
    assert client.get(f"{BASE}/missing/coverage").status_code == 404
    assert client.post(f"{BASE}/missing/end").status_code == 404


def test_segment_flow_and_error_mapping(client):
    sid = _start(client, framework_id="bant")
    resp = client.post(
        f"{BASE}/{sid}/segments",
        json={
            "speaker": "Client",
            "text": "The CFO has final say",
            "timestamp_seconds": 4.0,
            "tags": ["authority"],
            "confidences": {"authority": 0.92},
        },
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["segment_count"] == 1
    assert body["coverage"]["percentage"] == 25
    assert body["alerts"] == []

    regress = client.post(
        f"{BASE}/{sid}/segments",
        json={"speaker": "Rep", "text": "earlier", "timestamp_seconds": 3.0},
    )
    assert regress.status_code == 422

    bad = client.post(
        f"{BASE}/{sid}/extractions",
        json={"field": "need", "value": "x", "confidence": 2.0},
    )
    assert bad.status_code == 422

    ok = client.post(
        f"{BASE}/{sid}/extractions",
        json={"field": "need", "value": "Processing doubled", "confidence": 0.55},
    )
    assert ok.json() == {"applied": True, "coverage": client.get(f"{BASE}/{sid}/coverage").json()}

    transcript = client.get(f"{BASE}/{sid}/transcript").json()
    assert [s["text"] for s in transcript["segments"]] == ["The CFO has final say"]


def test_suggestion_alerts_and_end(client, clock):
    sid = _start(client)
    assert client.get(f"{BASE}/{sid}/suggestion").json()["suggestion"] is None

    clock.advance(15.0)
    suggestion = client.get(f"{BASE}/{sid}/suggestion").json()["suggestion"]
    assert suggestion["text"].startswith("Ask:")
    assert client.delete(f"{BASE}/{sid}/suggestion").json()["suggestion"] is None

    for idx in range(11):
        client.post(
            f"{BASE}/{sid}/segments",
            json={"speaker": "Rep", "text": f"point {idx}", "timestamp_seconds": float(idx)},
        )
    alerts = client.get(f"{BASE}/{sid}/alerts").json()["alerts"]
    assert [a["kind"] for a in alerts] == ["monologue"]

    ended = client.post(f"{BASE}/{sid}/end")
    assert ended.status_code == 200
    assert ended.json()["session"]["state"] == "ended"
    assert client.post(f"{BASE}/{sid}/end").status_code == 200

    late = client.post(
        f"{BASE}/{sid}/segments",
        json={"speaker": "Rep", "text": "late", "timestamp_seconds": 99.0},
    )
    assert late.status_code == 409


def test_discard_removes_session(client):
    sid = _start(client)
    assert client.delete(f"{BASE}/{sid}").status_code == 204
    assert client.get(f"{BASE}/{sid}/coverage").status_code == 404
    assert client.delete(f"{BASE}/{sid}").status_code == 404
