"""Messages: delivered message records, templates and deliveries (App API)."""
from __future__ import annotations
from typing import Any

from customerio.constants import MESSAGE_CHANNELS, MESSAGE_METRICS
from customerio.context import ExecutionContext
from customerio.properties import (
    NodeProperty,
    PropertyOption,
    PropertyType,
    humanize,
    limit_property,
    operation_property,
    return_all_property,
    show,
)
from customerio.resources.base import Resource, encode, list_or_page
from customerio.transport import ApiType, CustomerIoClient

RESOURCE = "messages"

_METRIC_NAMES = {"spammed": "Spam Complained"}

OPERATIONS = [
    operation_property(
        RESOURCE,
        [
            PropertyOption(name="Get", value="get_message", description="Get a message", action="Get a message"),
            PropertyOption(name="Get Deliveries", value="get_message_deliveries", description="Get the deliveries of a message", action="Get message deliveries"),
            PropertyOption(name="Get Templates", value="get_message_templates", description="Get the templates of a message", action="Get message templates"),
            PropertyOption(name="List", value="list_messages", description="List sent messages", action="List messages"),
        ],
        default="list_messages",
    )
]

FIELDS = [
    NodeProperty(
        display_name="Message ID",
        name="message_id",
        type=PropertyType.STRING,
        required=True,
        default="",
        description="The ID of the message",
        display_options=show(RESOURCE, ["get_message", "get_message_templates", "get_message_deliveries"]),
    ),
    return_all_property(RESOURCE, ["list_messages", "get_message_deliveries"]),
    limit_property(RESOURCE, ["list_messages", "get_message_deliveries"]),
    NodeProperty(
        display_name="Filters",
        name="filters",
        type=PropertyType.COLLECTION,
        default={},
        placeholder="Add Filter",
        display_options=show(RESOURCE, ["list_messages"]),
        children=[
            NodeProperty(display_name="Campaign ID", name="campaign_id", type=PropertyType.NUMBER, default=0,
                         description="Only messages sent by this campaign"),
            NodeProperty(
                display_name="Metric",
                name="metric",
                type=PropertyType.OPTIONS,
                default="sent",
                options=[PropertyOption(name=_METRIC_NAMES.get(m, m.title()), value=m) for m in MESSAGE_METRICS],
                description="Only messages that reached this state",
            ),
            NodeProperty(display_name="Newsletter ID", name="newsletter_id", type=PropertyType.NUMBER, default=0,
                         description="Only messages sent by this newsletter"),
            NodeProperty(
                display_name="Type",
                name="type",
                type=PropertyType.OPTIONS,
                default="",
                options=[
                    PropertyOption(name="All", value=""),
                    *(PropertyOption(name=humanize(c), value=c) for c in MESSAGE_CHANNELS),
                ],
                description="Only messages on this channel",
            ),
        ],
    ),
]


def message_filters(filters: dict) -> dict:
    """Zero IDs mean "no filter"; blank metric/type are dropped."""
    query = {}
    for key in ("campaign_id", "newsletter_id", "metric", "type"):
        if filters.get(key):
            query[key] = filters[key]
    return query


async def list_messages(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    query = message_filters(ctx.get_node_parameter("filters", index, {}))
    return await list_or_page(ctx, client, index, "/messages", "messages", query=query)


async def get_message(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    message_id = ctx.get_node_parameter("message_id", index)
    return await client.request("GET", f"/messages/{encode(message_id)}", api_type=ApiType.APP)


async def get_message_templates(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    message_id = ctx.get_node_parameter("message_id", index)
    return await client.request("GET", f"/messages/{encode(message_id)}/templates", api_type=ApiType.APP)


async def get_message_deliveries(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    message_id = ctx.get_node_parameter("message_id", index)
    return await list_or_page(ctx, client, index, f"/messages/{encode(message_id)}/deliveries", "deliveries")


resource = Resource(
    name=RESOURCE,
    display_name="Messages",
    description="Inspect sent messages and deliveries",
    operations=OPERATIONS,
    fields=FIELDS,
    handlers={
        "list_messages": list_messages,
        "get_message": get_message,
        "get_message_templates": get_message_templates,
        "get_message_deliveries": get_message_deliveries,
    },
)
execute = resource.execute
