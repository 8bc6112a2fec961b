"""Pipelines: Customer.io Data Pipelines (CDP) calls.

Every operation is a ``POST`` to the Pipelines API with a payload in the
Segment-compatible shape (camelCase keys such as ``userId`` and
``anonymousId``). Calls that need an identity get a generated anonymous id
when neither a user id nor an anonymous id is supplied.
"""
from __future__ import annotations
from typing import Any

from customerio.context import ExecutionContext
from customerio.helpers import (
    clean_object,
    collect_named_values,
    deep_merge,
    generate_anonymous_id,
    iso_timestamp,
    parse_json_lenient,
)
from customerio.properties import (
    NodeProperty,
    PropertyOption,
    PropertyType,
    key_value_collection,
    operation_property,
    show,
)
from customerio.resources.base import Resource
from customerio.transport import ApiType, CustomerIoClient

RESOURCE = "pipelines"

_IDENTIFIED = ["cdp_identify", "cdp_track", "cdp_page", "cdp_screen"]


def _named_values(name: str, display_name: str, operations: list[str], group: str, item: str) -> NodeProperty:
    return key_value_collection(
        name, display_name, RESOURCE, operations,
        item_display_name=item, group=group, key_field="name", key_display_name="Name",
    )


OPERATIONS = [
    operation_property(
        RESOURCE,
        [
            PropertyOption(name="Alias", value="cdp_alias", description="Merge two user identities", action="Alias a user"),
            PropertyOption(name="Group", value="cdp_group", description="Associate a user with a group", action="Group a user"),
            PropertyOption(name="Identify", value="cdp_identify", description="Identify a user and set traits", action="Identify a user"),
            PropertyOption(name="Page", value="cdp_page", description="Record a page view", action="Record a page view"),
            PropertyOption(name="Screen", value="cdp_screen", description="Record a mobile screen view", action="Record a screen view"),
            PropertyOption(name="Track", value="cdp_track", description="Track an event", action="Track an event"),
        ],
        default="cdp_identify",
    )
]

FIELDS = [
    NodeProperty(
        display_name="User ID",
        name="user_id",
        type=PropertyType.STRING,
        default="",
        description="The unique identifier for the user",
        display_options=show(RESOURCE, [*_IDENTIFIED, "cdp_group"]),
    ),
    NodeProperty(
        display_name="Anonymous ID",
        name="anonymous_id",
        type=PropertyType.STRING,
        default="",
        description="Anonymous identifier; one is generated when neither ID is set",
        display_options=show(RESOURCE, _IDENTIFIED),
    ),
    NodeProperty(
        display_name="Event Name",
        name="event_name",
        type=PropertyType.STRING,
        required=True,
        default="",
        description="The name of the event",
        display_options=show(RESOURCE, ["cdp_track"]),
    ),
    NodeProperty(
        display_name="Page Name",
        name="page_name",
        type=PropertyType.STRING,
        default="",
        description="The name of the page",
        display_options=show(RESOURCE, ["cdp_page"]),
    ),
    NodeProperty(
        display_name="Page Category",
        name="page_category",
        type=PropertyType.STRING,
        default="",
        description="The category of the page",
        display_options=show(RESOURCE, ["cdp_page"]),
    ),
    NodeProperty(
        display_name="Screen Name",
        name="screen_name",
        type=PropertyType.STRING,
        required=True,
        default="",
        description="The name of the screen",
        display_options=show(RESOURCE, ["cdp_screen"]),
    ),
    NodeProperty(
        display_name="Screen Category",
        name="screen_category",
        type=PropertyType.STRING,
        default="",
        description="The category of the screen",
        display_options=show(RESOURCE, ["cdp_screen"]),
    ),
    NodeProperty(
        display_name="Group ID",
        name="group_id",
        type=PropertyType.STRING,
        required=True,
        default="",
        description="The unique identifier for the group",
        display_options=show(RESOURCE, ["cdp_group"]),
    ),
    NodeProperty(
        display_name="Previous ID",
        name="previous_id",
        type=PropertyType.STRING,
        required=True,
        default="",
        description="The identity the user was known by",
        display_options=show(RESOURCE, ["cdp_alias"]),
    ),
    NodeProperty(
        display_name="New User ID",
        name="new_user_id",
        type=PropertyType.STRING,
        required=True,
        default="",
        description="The identity the user is known by from now on",
        display_options=show(RESOURCE, ["cdp_alias"]),
    ),
    _named_values("traits", "Traits", ["cdp_identify", "cdp_group"], "trait", "Trait"),
    _named_values("properties", "Properties", ["cdp_track"], "property", "Property"),
    _named_values("page_properties", "Properties", ["cdp_page"], "property", "Property"),
    _named_values("screen_properties", "Properties", ["cdp_screen"], "property", "Property"),
    NodeProperty(
        display_name="Options",
        name="options",
        type=PropertyType.COLLECTION,
        default={},
        placeholder="Add Option",
        display_options=show(RESOURCE),
        children=[
            NodeProperty(display_name="Context", name="context", type=PropertyType.JSON, default="{}",
                         description="Context object (ip, locale, userAgent...)"),
            NodeProperty(display_name="Integrations", name="integrations", type=PropertyType.JSON, default="{}",
                         description="Destinations to enable or disable for this call"),
            NodeProperty(display_name="Message ID", name="message_id", type=PropertyType.STRING, default="",
                         description="Unique ID used to deduplicate the call"),
            NodeProperty(display_name="Timestamp", name="timestamp", type=PropertyType.DATE_TIME, default="",
                         description="When the call happened (defaults to now)"),
        ],
    ),
]


def common_payload(options: dict) -> dict:
    payload = {}
    if options.get("timestamp"):
        payload["timestamp"] = iso_timestamp(options["timestamp"])
    if options.get("message_id"):
        payload["messageId"] = options["message_id"]
    for key in ("context", "integrations"):
        if options.get(key):
            payload[key] = parse_json_lenient(options[key], fallback={})
    return payload


def _identity(ctx: ExecutionContext, index: int, body: dict, generate: bool = True) -> dict:
    user_id = ctx.get_node_parameter("user_id", index, "")
    if user_id:
        body["userId"] = user_id
    if generate:
        anonymous_id = ctx.get_node_parameter("anonymous_id", index, "")
        if not user_id and not anonymous_id:
            anonymous_id = generate_anonymous_id()
        if anonymous_id:
            body["anonymousId"] = anonymous_id
    return body


def _attach(body: dict, key: str, values: dict) -> dict:
    if values:
        body[key] = values
    return body


def identify_payload(ctx: ExecutionContext, index: int) -> tuple[str, dict]:
    body = _identity(ctx, index, {"type": "identify"})
    return "/identify", _attach(body, "traits", collect_named_values(ctx.get_node_parameter("traits", index, {}), "trait"))


def track_payload(ctx: ExecutionContext, index: int) -> tuple[str, dict]:
    body = _identity(ctx, index, {"type": "track", "event": ctx.get_node_parameter("event_name", index)})
    properties = collect_named_values(ctx.get_node_parameter("properties", index, {}), "property")
    return "/track", _attach(body, "properties", properties)


def page_payload(ctx: ExecutionContext, index: int) -> tuple[str, dict]:
    body = _identity(ctx, index, {"type": "page"})
    page_name = ctx.get_node_parameter("page_name", index, "")
    page_category = ctx.get_node_parameter("page_category", index, "")
    if page_name:
        body["name"] = page_name
    if page_category:
        body["category"] = page_category
    properties = collect_named_values(ctx.get_node_parameter("page_properties", index, {}), "property")
    return "/page", _attach(body, "properties", properties)


def screen_payload(ctx: ExecutionContext, index: int) -> tuple[str, dict]:
    body = _identity(ctx, index, {"type": "screen", "name": ctx.get_node_parameter("screen_name", index)})
    screen_category = ctx.get_node_parameter("screen_category", index, "")
    if screen_category:
        body["category"] = screen_category
    properties = collect_named_values(ctx.get_node_parameter("screen_properties", index, {}), "property")
    return "/screen", _attach(body, "properties", properties)


def group_payload(ctx: ExecutionContext, index: int) -> tuple[str, dict]:
    body = _identity(ctx, index, {"type": "group", "groupId": ctx.get_node_parameter("group_id", index)}, generate=False)
    return "/group", _attach(body, "traits", collect_named_values(ctx.get_node_parameter("traits", index, {}), "trait"))


def alias_payload(ctx: ExecutionContext, index: int) -> tuple[str, dict]:
    return "/alias", {
        "type": "alias",
        "previousId": ctx.get_node_parameter("previous_id", index),
        "userId": ctx.get_node_parameter("new_user_id", index),
    }


def _sender(build):
    async def send(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
        endpoint, body = build(ctx, index)
        payload = deep_merge(common_payload(ctx.get_node_parameter("options", index, {})), body)
        response = await client.request("POST", endpoint, clean_object(payload), api_type=ApiType.PIPELINES)
        return response or {"success": True}

    send.__name__ = build.__name__.replace("_payload", "")
    return send


resource = Resource(
    name=RESOURCE,
    display_name="Pipelines",
    description="Send data through Customer.io Data Pipelines",
    operations=OPERATIONS,
    fields=FIELDS,
    handlers={
        "cdp_identify": _sender(identify_payload),
        "cdp_track": _sender(track_payload),
        "cdp_page": _sender(page_payload),
        "cdp_screen": _sender(screen_payload),
        "cdp_group": _sender(group_payload),
        "cdp_alias": _sender(alias_payload),
    },
)
execute = resource.execute
