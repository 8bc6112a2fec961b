"""Customer.io reporting-webhook router.

Exposes the trigger at ``POST /webhooks/customerio``. Credentials and trigger
settings come from the environment (see ``CustomerIoCredentials.from_env`` and
``WebhookConfig.from_env``); accepted events are handed to the event sink.
"""

import json
import logging
from typing import Any, Callable

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from customerio.config import WebhookConfig
from customerio.context import ExecutionContext, WebhookRequest
from customerio.credentials import CustomerIoCredentials
from customerio.errors import CredentialsError
from customerio.trigger import CustomerIoTrigger

logger = logging.getLogger(__name__)

router = APIRouter()

EventSink = Callable[[list[dict[str, Any]]], None]

_trigger = CustomerIoTrigger()


# ============================================================================
# Dependencies
# ============================================================================

def get_trigger_context() -> ExecutionContext:
    """Build the trigger context from environment settings."""
    try:
        credentials = CustomerIoCredentials.from_env()
    except CredentialsError as exc:
        logger.error("Customer.io webhook route is not configured: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return ExecutionContext(credentials=credentials, parameters=WebhookConfig.from_env().to_parameters())


def log_events(items: list[dict[str, Any]]) -> None:
    for item in items:
        meta = item.get("_metadata", {})
        logger.info(
            "Customer.io event %s (%s)", meta.get("mapped_event") or meta.get("event_category"), item.get("event_id"),
        )


def get_event_sink() -> EventSink:
    return log_events


# ============================================================================
# Webhook Endpoint
# ============================================================================

@router.post("/customerio")
async def customerio_webhook(
    request: Request,
    ctx: ExecutionContext = Depends(get_trigger_context),
    sink: EventSink = Depends(get_event_sink),
):
    raw_body = await request.body()
    try:
        body = json.loads(raw_body) if raw_body else {}
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body must be JSON")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")

    result = _trigger.handle(ctx, WebhookRequest(body=body, headers=dict(request.headers), raw_body=raw_body))
    if result.triggered:
        sink(result.workflow_data)
    return JSONResponse(status_code=result.status_code, content=result.body)
