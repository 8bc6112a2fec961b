"""Transactional: send one-to-one email, push and SMS messages (App API)."""
from __future__ import annotations
from typing import Any

from customerio.context import ExecutionContext
from customerio.helpers import clean_object, parse_json, parse_json_lenient, prepare_attributes
from customerio.properties import (
    NodeProperty,
    PropertyOption,
    PropertyType,
    key_value_collection,
    operation_property,
    show,
)
from customerio.resources.base import Resource, encode
from customerio.transport import ApiType, CustomerIoClient

RESOURCE = "transactional"

_SEND = ["send_email", "send_push", "send_sms"]
_EMAIL_TEXT_OPTIONS = ("from", "reply_to", "bcc", "subject")
_EMAIL_FLAG_OPTIONS = ("tracked", "track_opens", "disable_message_retention", "send_to_unsubscribed", "queue_draft")
_DELIVERY_FLAG_OPTIONS = ("disable_message_retention", "send_to_unsubscribed")


def _flag(display_name: str, name: str, default: bool, description: str) -> NodeProperty:
    return NodeProperty(display_name=display_name, name=name, type=PropertyType.BOOLEAN, default=default,
                        description=description)


def _delivery_flags() -> list[NodeProperty]:
    return [
        _flag("Disable Message Retention", "disable_message_retention", False,
              "Whether to skip storing the message body"),
        _flag("Send to Unsubscribed", "send_to_unsubscribed", False,
              "Whether to send even if the person is unsubscribed"),
    ]


OPERATIONS = [
    operation_property(
        RESOURCE,
        [
            PropertyOption(name="Get Status", value="get_transactional_status", description="Get the delivery status of a message", action="Get transactional message status"),
            PropertyOption(name="Send Email", value="send_email", description="Send a transactional email", action="Send a transactional email"),
            PropertyOption(name="Send Push", value="send_push", description="Send a transactional push notification", action="Send a transactional push"),
            PropertyOption(name="Send SMS", value="send_sms", description="Send a transactional SMS", action="Send a transactional SMS"),
        ],
        default="send_email",
    )
]

FIELDS = [
    NodeProperty(
        display_name="Transactional Message ID",
        name="transactional_id",
        type=PropertyType.NUMBER,
        required=True,
        default=0,
        description="The ID of the transactional message template",
        display_options=show(RESOURCE, _SEND),
    ),
    NodeProperty(
        display_name="To",
        name="to",
        type=PropertyType.STRING,
        required=True,
        default="",
        placeholder="name@email.com",
        description="The recipient email address",
        display_options=show(RESOURCE, ["send_email"]),
    ),
    NodeProperty(
        display_name="Identifiers",
        name="identifiers",
        type=PropertyType.JSON,
        required=True,
        default='{\n  "id": "customer_123"\n}',
        description="JSON object identifying the recipient (id, email or cio_id)",
        display_options=show(RESOURCE, ["send_push", "send_sms"]),
    ),
    NodeProperty(
        display_name="Email Options",
        name="email_options",
        type=PropertyType.COLLECTION,
        default={},
        placeholder="Add Option",
        display_options=show(RESOURCE, ["send_email"]),
        children=[
            NodeProperty(display_name="BCC", name="bcc", type=PropertyType.STRING, default="",
                         description="Blind copy recipients"),
            NodeProperty(display_name="From", name="from", type=PropertyType.STRING, default="",
                         description="Override the sender address"),
            NodeProperty(display_name="Reply To", name="reply_to", type=PropertyType.STRING, default="",
                         description="Reply-to address"),
            NodeProperty(display_name="Subject", name="subject", type=PropertyType.STRING, default="",
                         description="Override the template subject"),
            _flag("Queue Draft", "queue_draft", False, "Whether to queue the message as a draft"),
            _flag("Tracked", "tracked", True, "Whether to track clicks"),
            _flag("Track Opens", "track_opens", True, "Whether to track opens"),
            *_delivery_flags(),
        ],
    ),
    key_value_collection("message_data_ui", "Message Data", RESOURCE, _SEND, item_display_name="Data"),
    NodeProperty(
        display_name="Push Options",
        name="push_options",
        type=PropertyType.COLLECTION,
        default={},
        placeholder="Add Option",
        display_options=show(RESOURCE, ["send_push"]),
        children=[
            NodeProperty(display_name="Custom Device", name="custom_device", type=PropertyType.JSON, default="{}",
                         description="Send to this device instead of the person's stored devices"),
            *_delivery_flags(),
        ],
    ),
    NodeProperty(
        display_name="SMS Options",
        name="sms_options",
        type=PropertyType.COLLECTION,
        default={},
        placeholder="Add Option",
        display_options=show(RESOURCE, ["send_sms"]),
        children=_delivery_flags(),
    ),
    NodeProperty(
        display_name="Delivery ID",
        name="delivery_id",
        type=PropertyType.STRING,
        required=True,
        default="",
        description="The delivery ID returned when the message was sent",
        display_options=show(RESOURCE, ["get_transactional_status"]),
    ),
]


def _copy_flags(body: dict, options: dict, names: tuple) -> None:
    for name in names:
        if name in options:
            body[name] = options[name]


def _with_message_data(ctx: ExecutionContext, index: int, body: dict) -> dict:
    message_data = prepare_attributes(ctx.get_node_parameter("message_data_ui", index, {}))
    if message_data:
        body["message_data"] = message_data
    return clean_object(body)


async def send_email(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    transactional_id = ctx.get_node_parameter("transactional_id", index)
    to = ctx.get_node_parameter("to", index)
    options = ctx.get_node_parameter("email_options", index, {})

    body = {"transactional_message_id": transactional_id, "to": to, "identifiers": {"email": to}}
    for name in _EMAIL_TEXT_OPTIONS:
        if options.get(name):
            body[name] = options[name]
    _copy_flags(body, options, _EMAIL_FLAG_OPTIONS)

    return await client.request("POST", "/send/email", _with_message_data(ctx, index, body), api_type=ApiType.APP)


async def send_push(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    """Send a transactional push. ``identifiers`` must be a JSON object."""
    transactional_id = ctx.get_node_parameter("transactional_id", index)
    identifiers = parse_json(
        ctx.get_node_parameter("identifiers", index), "Invalid JSON in identifiers", expected=dict,
    )
    options = ctx.get_node_parameter("push_options", index, {})

    body = {"transactional_message_id": transactional_id, "identifiers": identifiers}
    if options.get("custom_device"):
        body["custom_device"] = parse_json_lenient(options["custom_device"])
    _copy_flags(body, options, _DELIVERY_FLAG_OPTIONS)

    return await client.request("POST", "/send/push", _with_message_data(ctx, index, body), api_type=ApiType.APP)


async def send_sms(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    transactional_id = ctx.get_node_parameter("transactional_id", index)
    identifiers = parse_json(
        ctx.get_node_parameter("identifiers", index), "Invalid JSON in identifiers", expected=dict,
    )
    options = ctx.get_node_parameter("sms_options", index, {})

    body = {"transactional_message_id": transactional_id, "identifiers": identifiers}
    _copy_flags(body, options, _DELIVERY_FLAG_OPTIONS)

    return await client.request("POST", "/send/sms", _with_message_data(ctx, index, body), api_type=ApiType.APP)


async def get_transactional_status(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    delivery_id = ctx.get_node_parameter("delivery_id", index)
    return await client.request("GET", f"/messages/{encode(delivery_id)}", api_type=ApiType.APP)


resource = Resource(
    name=RESOURCE,
    display_name="Transactional",
    description="Send transactional messages",
    operations=OPERATIONS,
    fields=FIELDS,
    handlers={
        "send_email": send_email,
        "send_push": send_push,
        "send_sms": send_sms,
        "get_transactional_status": get_transactional_status,
    },
)
execute = resource.execute
