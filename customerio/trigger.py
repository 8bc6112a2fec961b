"""
Customer.io reporting-webhook trigger.

Customer.io reporting webhooks are configured by hand in the dashboard, so
the lifecycle hooks only report the URL to configure. Incoming calls are
signature-checked, classified into an event value (``email_opened``,
``sms_failed``...) and filtered against the selected events.
"""
from __future__ import annotations
from typing import Any, Optional
import json
import logging

from customerio.constants import (
    WEBHOOK_EVENT_ALIASES,
    WEBHOOK_EVENT_VALUES,
    WEBHOOK_EVENTS,
    WEBHOOK_OBJECT_TYPES,
)
from customerio.context import ExecutionContext, WebhookRequest, WebhookResponse
from customerio.credentials import CREDENTIAL_NAME
from customerio.helpers import utc_now_iso
from customerio.properties import NodeDescription, NodeProperty, PropertyOption, PropertyType
from customerio.webhooks import SIGNATURE_HEADER, TIMESTAMP_HEADER, validate_webhook_signature

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "webhook"


def event_category(event_type: Optional[str], object_type: Optional[str]) -> Optional[str]:
    """``("opened", "email")`` -> ``"email_opened"``; unknown object types keep the bare metric."""
    if object_type in WEBHOOK_OBJECT_TYPES:
        return f"{object_type}_{event_type}"
    return event_type


def map_event(category: Optional[str]) -> Optional[str]:
    """Event value for a category, or ``None`` when it is not a known event."""
    if not category:
        return None
    mapped = WEBHOOK_EVENT_ALIASES.get(category, category)
    return mapped if mapped in WEBHOOK_EVENT_VALUES else None


class CustomerIoTrigger:
    """Start a workflow when Customer.io sends a reporting webhook."""

    description = NodeDescription(
        display_name="Customer.io Trigger",
        name="customer_io_trigger",
        description="Handle Customer.io reporting webhooks",
        group=["trigger"],
        credentials=[CREDENTIAL_NAME],
        webhooks=[{"name": "default", "http_method": "POST", "response_mode": "on_received", "path": WEBHOOK_PATH}],
        properties=[
            NodeProperty(
                display_name="Events",
                name="events",
                type=PropertyType.MULTI_OPTIONS,
                required=True,
                default=[],
                options=[PropertyOption(name=name, value=value, description=desc) for name, value, desc in WEBHOOK_EVENTS],
                description="The events to listen to; none selected means all events",
            ),
            NodeProperty(
                display_name="Options",
                name="options",
                type=PropertyType.COLLECTION,
                default={},
                placeholder="Add Option",
                children=[
                    NodeProperty(
                        display_name="Validate Signature",
                        name="validate_signature",
                        type=PropertyType.BOOLEAN,
                        default=True,
                        description="Whether to verify the X-CIO-Signature header",
                    ),
                    NodeProperty(
                        display_name="Webhook Signing Key",
                        name="webhook_signing_key",
                        type=PropertyType.STRING,
                        password=True,
                        default="",
                        description="Signing key from the webhook settings; defaults to the Track API key",
                    ),
                ],
            ),
        ],
    )

    # --- Lifecycle ---

    async def check_exists(self, webhook_url: str) -> bool:
        return True

    async def create(self, webhook_url: str) -> bool:
        logger.info("Customer.io webhook URL: %s", webhook_url)
        logger.info("Configure this URL in your Customer.io reporting webhook settings")
        return True

    async def delete(self, webhook_url: str) -> bool:
        return True

    # --- Incoming calls ---

    def handle(self, ctx: ExecutionContext, request: WebhookRequest) -> WebhookResponse:
        options = ctx.get_node_parameter("options", 0, {})
        selected = ctx.get_node_parameter("events", 0, [])
        body = request.body

        if options.get("validate_signature", True) is not False:
            rejection = self._check_signature(ctx, request, options)
            if rejection is not None:
                return rejection

        event_type = body.get("event_type") or body.get("metric")
        object_type = body.get("object_type")
        category = event_category(event_type, object_type)
        mapped = map_event(category)

        if selected and mapped and mapped not in selected:
            logger.debug("Customer.io webhook %s not selected, skipping", mapped)
            return WebhookResponse(body={"received": True, "processed": False})

        item: dict[str, Any] = {
            **body,
            "_metadata": {
                "event_type": event_type,
                "event_category": category,
                "mapped_event": mapped,
                "object_type": object_type,
                "received_at": utc_now_iso(),
            },
        }
        return WebhookResponse(body={"received": True}, workflow_data=[item])

    def _check_signature(
        self, ctx: ExecutionContext, request: WebhookRequest, options: dict,
    ) -> Optional[WebhookResponse]:
        signature = request.header(SIGNATURE_HEADER)
        if not signature:
            logger.warning("Customer.io webhook received without signature")
            return WebhookResponse(status_code=401, body={"error": "Missing signature"})

        signing_key = options.get("webhook_signing_key") or ctx.credentials.track_api_key
        raw_body = request.raw_body if request.raw_body else json.dumps(request.body, separators=(",", ":"))

        if not validate_webhook_signature(raw_body, signature, request.header(TIMESTAMP_HEADER), signing_key):
            logger.warning("Customer.io webhook signature validation failed")
            return WebhookResponse(status_code=401, body={"error": "Invalid signature"})
        return None
