"""Events: track customer, anonymous and page-view events (Track API)."""
from __future__ import annotations
from typing import Any

from customerio.context import ExecutionContext
from customerio.helpers import (
    clean_object,
    format_timestamp,
    generate_anonymous_id,
    prepare_attributes,
    prepare_event_data,
)
from customerio.properties import (
    NodeProperty,
    PropertyOption,
    PropertyType,
    key_value_collection,
    operation_property,
    show,
)
from customerio.resources.base import Resource, acknowledge, encode
from customerio.transport import ApiType, CustomerIoClient

RESOURCE = "events"


def _timestamp_collection(name: str, operations: list[str], extra: tuple = ()) -> NodeProperty:
    return NodeProperty(
        display_name="Additional Fields",
        name=name,
        type=PropertyType.COLLECTION,
        default={},
        placeholder="Add Field",
        display_options=show(RESOURCE, operations),
        children=[
            *extra,
            NodeProperty(display_name="Timestamp", name="timestamp", type=PropertyType.DATE_TIME, default="",
                         description="When the event happened (defaults to now)"),
        ],
    )


OPERATIONS = [
    operation_property(
        RESOURCE,
        [
            PropertyOption(name="Track", value="track", description="Track an event for a person", action="Track an event"),
            PropertyOption(name="Track Anonymous", value="track_anonymous", description="Track an event without a known person", action="Track an anonymous event"),
            PropertyOption(name="Track Page View", value="track_page_view", description="Track a page view for a person", action="Track a page view"),
        ],
        default="track",
    )
]

FIELDS = [
    NodeProperty(
        display_name="Identifier",
        name="identifier",
        type=PropertyType.STRING,
        required=True,
        default="",
        description="The unique identifier for the person (ID or email)",
        display_options=show(RESOURCE, ["track", "track_page_view"]),
    ),
    NodeProperty(
        display_name="Event Name",
        name="event_name",
        type=PropertyType.STRING,
        required=True,
        default="",
        description="The name of the event",
        display_options=show(RESOURCE, ["track", "track_anonymous"]),
    ),
    _timestamp_collection("additional_fields", ["track"]),
    key_value_collection("event_data_ui", "Event Data", RESOURCE, ["track", "track_anonymous"], item_display_name="Data"),
    NodeProperty(
        display_name="Anonymous ID",
        name="anonymous_id",
        type=PropertyType.STRING,
        default="",
        description="Anonymous identifier; one is generated when left empty",
        display_options=show(RESOURCE, ["track_anonymous"]),
    ),
    _timestamp_collection("additional_fields_anon", ["track_anonymous"]),
    NodeProperty(
        display_name="Page URL",
        name="page_url",
        type=PropertyType.STRING,
        required=True,
        default="",
        description="The URL of the page viewed",
        display_options=show(RESOURCE, ["track_page_view"]),
    ),
    _timestamp_collection(
        "page_view_fields",
        ["track_page_view"],
        extra=(
            NodeProperty(display_name="Referrer", name="referrer", type=PropertyType.STRING, default="",
                         description="The referring URL"),
        ),
    ),
]


def _event_body(ctx: ExecutionContext, index: int, fields_name: str) -> dict:
    additional = ctx.get_node_parameter(fields_name, index, {})
    return prepare_event_data(
        ctx.get_node_parameter("event_name", index),
        prepare_attributes(ctx.get_node_parameter("event_data_ui", index, {})),
        format_timestamp(additional.get("timestamp")),
    )


async def track(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    identifier = ctx.get_node_parameter("identifier", index)
    body = _event_body(ctx, index, "additional_fields")

    response = await client.request(
        "POST", f"/customers/{encode(identifier)}/events", clean_object(body), api_type=ApiType.TRACK,
    )
    return acknowledge(response, identifier=identifier, event=body["name"])


async def track_anonymous(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    """Anonymous events get a generated ``anon_`` id when none is given."""
    anonymous_id = ctx.get_node_parameter("anonymous_id", index, "") or generate_anonymous_id()
    body = {"anonymous_id": anonymous_id, **_event_body(ctx, index, "additional_fields_anon")}

    response = await client.request("POST", "/events", clean_object(body), api_type=ApiType.TRACK)
    return acknowledge(response, anonymous_id=anonymous_id, event=body["name"])


async def track_page_view(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    identifier = ctx.get_node_parameter("identifier", index)
    page_url = ctx.get_node_parameter("page_url", index)
    fields = ctx.get_node_parameter("page_view_fields", index, {})

    body = {"type": "page", "name": page_url}
    if fields.get("referrer"):
        body["data"] = {"referrer": fields["referrer"]}
    if fields.get("timestamp"):
        body["timestamp"] = format_timestamp(fields["timestamp"])

    response = await client.request(
        "POST", f"/customers/{encode(identifier)}/events", clean_object(body), api_type=ApiType.TRACK,
    )
    return acknowledge(response, identifier=identifier, page=page_url)


resource = Resource(
    name=RESOURCE,
    display_name="Events",
    description="Track customer events and page views",
    operations=OPERATIONS,
    fields=FIELDS,
    handlers={
        "track": track,
        "track_anonymous": track_anonymous,
        "track_page_view": track_page_view,
    },
)
execute = resource.execute
