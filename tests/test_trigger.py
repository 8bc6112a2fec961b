"""Test the reporting-webhook trigger."""
import json

import pytest

from customerio.context import ExecutionContext, WebhookRequest
from customerio.credentials import CustomerIoCredentials
from customerio.trigger import CustomerIoTrigger, event_category, map_event
from customerio.webhooks import sign_payload

CREDS = CustomerIoCredentials(site_id="site", track_api_key="track-key", app_api_key="app-key")
TIMESTAMP = "1704067200"

OPENED = {
    "event_id": "01HKF4E6Z3",
    "object_type": "email",
    "metric": "opened",
    "timestamp": 1704067200,
    "data": {"customer_id": "42", "delivery_id": "d-1"},
}


def signed_request(body, key="track-key", headers=None):
    raw = json.dumps(body).encode()
    signed = {
        "X-CIO-Signature": sign_payload(raw, TIMESTAMP, key),
        "X-CIO-Timestamp": TIMESTAMP,
    }
    signed.update(headers or {})
    return WebhookRequest(body=body, headers=signed, raw_body=raw)


def context(events=None, **options):
    return ExecutionContext(credentials=CREDS, parameters={"events": events or [], "options": options})


def test_event_category_and_mapping():
    assert event_category("opened", "email") == "email_opened"
    assert event_category("sent", "in_app") == "in_app_sent"
    assert event_category("subscribed", "customer") == "subscribed"
    assert map_event("email_spamreport") == "email_complained"
    assert map_event("email_opened") == "email_opened"
    assert map_event("customer_subscribed") is None
    assert map_event(None) is None


def test_valid_event_starts_workflow():
    result = CustomerIoTrigger().handle(context(), signed_request(OPENED))

    assert result.status_code == 200
    assert result.body == {"received": True}
    assert result.triggered
    item = result.workflow_data[0]
    assert item["event_id"] == "01HKF4E6Z3"
    meta = item["_metadata"]
    assert meta["event_type"] == "opened"
    assert meta["event_category"] == "email_opened"
    assert meta["mapped_event"] == "email_opened"
    assert meta["object_type"] == "email"
    assert meta["received_at"].endswith("Z")


def test_missing_signature_rejected():
    request = WebhookRequest(body=OPENED, headers={"x-cio-timestamp": TIMESTAMP})
    result = CustomerIoTrigger().handle(context(), request)
    assert result.status_code == 401
    assert result.body == {"error": "Missing signature"}
    assert not result.triggered


def test_invalid_signature_rejected():
    result = CustomerIoTrigger().handle(context(), signed_request(OPENED, key="wrong-key"))
    assert result.status_code == 401
    assert result.body == {"error": "Invalid signature"}


def test_missing_timestamp_rejected():
    request = signed_request(OPENED)
    del request.headers["X-CIO-Timestamp"]
    result = CustomerIoTrigger().handle(context(), request)
    assert result.status_code == 401
    assert result.body == {"error": "Invalid signature"}


def test_custom_signing_key():
    request = signed_request(OPENED, key="dashboard-key")
    result = CustomerIoTrigger().handle(context(webhook_signing_key="dashboard-key"), request)
    assert result.status_code == 200


def test_headers_matched_case_insensitively():
    raw = json.dumps(OPENED).encode()
    request = WebhookRequest(
        body=OPENED,
        raw_body=raw,
        headers={"x-cio-signature": sign_payload(raw, TIMESTAMP, "track-key"), "X-Cio-Timestamp": TIMESTAMP},
    )
    assert CustomerIoTrigger().handle(context(), request).status_code == 200


def test_raw_body_falls_back_to_compact_json():
    compact = json.dumps(OPENED, separators=(",", ":"))
    request = WebhookRequest(
        body=OPENED,
        headers={"x-cio-signature": sign_payload(compact, TIMESTAMP, "track-key"), "x-cio-timestamp": TIMESTAMP},
    )
    assert CustomerIoTrigger().handle(context(), request).status_code == 200


def test_validation_can_be_disabled():
    request = WebhookRequest(body=OPENED)
    result = CustomerIoTrigger().handle(context(validate_signature=False), request)
    assert result.triggered


def test_unselected_event_acknowledged_without_processing():
    result = CustomerIoTrigger().handle(context(events=["email_clicked"]), signed_request(OPENED))
    assert result.status_code == 200
    assert result.body == {"received": True, "processed": False}
    assert not result.triggered


def test_spam_report_matches_complained_selection():
    body = {**OPENED, "metric": "spamreport"}
    result = CustomerIoTrigger().handle(context(events=["email_complained"]), signed_request(body))
    assert result.triggered
    assert result.workflow_data[0]["_metadata"]["mapped_event"] == "email_complained"


def test_unknown_event_passes_selection():
    body = {"event_id": "x", "object_type": "customer", "metric": "subscribed"}
    result = CustomerIoTrigger().handle(context(events=["email_opened"]), signed_request(body))
    assert result.triggered
    assert result.workflow_data[0]["_metadata"]["mapped_event"] is None


def test_event_type_preferred_over_metric():
    body = {"object_type": "sms", "event_type": "failed", "metric": "sent"}
    result = CustomerIoTrigger().handle(context(), signed_request(body))
    assert result.workflow_data[0]["_metadata"]["mapped_event"] == "sms_failed"


@pytest.mark.asyncio
async def test_lifecycle_hooks_always_succeed():
    trigger = CustomerIoTrigger()
    assert await trigger.check_exists("https://hooks.example.com/webhook")
    assert await trigger.create("https://hooks.example.com/webhook")
    assert await trigger.delete("https://hooks.example.com/webhook")


def test_trigger_event_options():
    events = CustomerIoTrigger.description.properties[0]
    assert events.name == "events"
    assert "email_opened" in events.option_values()
    assert "in_app_clicked" in events.option_values()
