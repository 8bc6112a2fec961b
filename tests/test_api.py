"""Test the webhook API routes."""
import json

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.router import get_event_sink
from customerio.webhooks import sign_payload

TIMESTAMP = "1704067200"
BODY = {"event_id": "evt-1", "object_type": "email", "metric": "clicked", "data": {"customer_id": "42"}}


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setenv("CUSTOMERIO_SITE_ID", "site")
    monkeypatch.setenv("CUSTOMERIO_TRACK_API_KEY", "track-key")
    monkeypatch.setenv("CUSTOMERIO_APP_API_KEY", "app-key")
    monkeypatch.delenv("CUSTOMERIO_WEBHOOK_EVENTS", raising=False)
    monkeypatch.delenv("CUSTOMERIO_VALIDATE_SIGNATURE", raising=False)
    monkeypatch.delenv("CUSTOMERIO_WEBHOOK_SIGNING_KEY", raising=False)
    monkeypatch.delenv("CUSTOMERIO_REGION", raising=False)


@pytest.fixture
def received():
    events = []
    app.dependency_overrides[get_event_sink] = lambda: events.extend
    yield events
    app.dependency_overrides.clear()


def post_signed(client, body, key="track-key"):
    raw = json.dumps(body).encode()
    headers = {
        "Content-Type": "application/json",
        "X-CIO-Signature": sign_payload(raw, TIMESTAMP, key),
        "X-CIO-Timestamp": TIMESTAMP,
    }
    return client.post("/webhooks/customerio", content=raw, headers=headers)


def test_health():
    with TestClient(app) as client:
        resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


def test_signed_webhook_accepted(env, received):
    with TestClient(app) as client:
        resp = post_signed(client, BODY)
    assert resp.status_code == 200
    assert resp.json() == {"received": True}
    assert len(received) == 1
    assert received[0]["_metadata"]["mapped_event"] == "email_clicked"


def test_bad_signature_rejected(env, received):
    with TestClient(app) as client:
        resp = post_signed(client, BODY, key="wrong")
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid signature"}
    assert received == []


def test_event_filter_from_env(env, received, monkeypatch):
    monkeypatch.setenv("CUSTOMERIO_WEBHOOK_EVENTS", "email_opened,email_bounced")
    with TestClient(app) as client:
        resp = post_signed(client, BODY)
    assert resp.json() == {"received": True, "processed": False}
    assert received == []


def test_missing_credentials_is_server_error(monkeypatch, received):
    monkeypatch.delenv("CUSTOMERIO_SITE_ID", raising=False)
    monkeypatch.delenv("CUSTOMERIO_TRACK_API_KEY", raising=False)
    monkeypatch.delenv("CUSTOMERIO_APP_API_KEY", raising=False)
    with TestClient(app) as client:
        resp = client.post("/webhooks/customerio", json=BODY)
    assert resp.status_code == 500
    assert "Missing credential" in resp.json()["detail"]


def test_non_json_body_rejected(env, received, monkeypatch):
    monkeypatch.setenv("CUSTOMERIO_VALIDATE_SIGNATURE", "false")
    with TestClient(app) as client:
        resp = client.post("/webhooks/customerio", content=b"not json")
    assert resp.status_code == 400
