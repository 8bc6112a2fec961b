"""Broadcasts: create, trigger and report on one-off sends (App API)."""
from __future__ import annotations
from typing import Any

from customerio.context import ExecutionContext
from customerio.helpers import clean_object, parse_json, prepare_attributes, split_list
from customerio.properties import (
    DisplayOptions,
    NodeProperty,
    PropertyOption,
    PropertyType,
    choices,
    key_value_collection,
    limit_property,
    metric_options_property,
    operation_property,
    return_all_property,
    show,
)
from customerio.resources.base import Resource, list_or_page, metric_query
from customerio.transport import ApiType, CustomerIoClient

RESOURCE = "broadcasts"

_TRIGGER_FLAGS = ("id_ignore_missing", "email_add_duplicates", "email_ignore_missing")


def _for_recipients(recipient_type: str) -> DisplayOptions:
    return DisplayOptions(
        show={"resource": [RESOURCE], "operation": ["trigger_broadcast"], "recipient_type": [recipient_type]},
    )


OPERATIONS = [
    operation_property(
        RESOURCE,
        [
            PropertyOption(name="Create", value="create_broadcast", description="Create a new broadcast", action="Create a broadcast"),
            PropertyOption(name="Get", value="get_broadcast", description="Get a broadcast", action="Get a broadcast"),
            PropertyOption(name="Get Actions", value="get_broadcast_actions", description="Get the actions of a broadcast", action="Get broadcast actions"),
            PropertyOption(name="Get Metrics", value="get_broadcast_metrics", description="Get metrics for a broadcast", action="Get broadcast metrics"),
            PropertyOption(name="Get Triggers", value="list_broadcast_triggers", description="List the triggers of a broadcast", action="Get broadcast triggers"),
            PropertyOption(name="List", value="list_broadcasts", description="List all broadcasts", action="List broadcasts"),
            PropertyOption(name="Trigger", value="trigger_broadcast", description="Trigger a broadcast send", action="Trigger a broadcast"),
        ],
        default="list_broadcasts",
    )
]

FIELDS = [
    NodeProperty(
        display_name="Broadcast ID",
        name="broadcast_id",
        type=PropertyType.NUMBER,
        required=True,
        default=0,
        description="The ID of the broadcast",
        display_options=show(
            RESOURCE,
            ["get_broadcast", "trigger_broadcast", "get_broadcast_metrics", "get_broadcast_actions", "list_broadcast_triggers"],
        ),
    ),
    NodeProperty(
        display_name="Name",
        name="name",
        type=PropertyType.STRING,
        required=True,
        default="",
        description="The name of the broadcast",
        display_options=show(RESOURCE, ["create_broadcast"]),
    ),
    NodeProperty(
        display_name="Trigger Type",
        name="trigger_type",
        type=PropertyType.OPTIONS,
        required=True,
        options=choices(("API", "api"), ("Scheduled", "scheduled")),
        default="api",
        description="How the broadcast is triggered",
        display_options=show(RESOURCE, ["create_broadcast"]),
    ),
    NodeProperty(
        display_name="Broadcast Options",
        name="broadcast_options",
        type=PropertyType.COLLECTION,
        default={},
        placeholder="Add Option",
        display_options=show(RESOURCE, ["create_broadcast"]),
        children=[
            NodeProperty(display_name="Data Type Identifier", name="data_type_identifier", type=PropertyType.STRING,
                         default="", description="Identifier used to match trigger data to people"),
        ],
    ),
    NodeProperty(
        display_name="Recipient Type",
        name="recipient_type",
        type=PropertyType.OPTIONS,
        required=True,
        options=choices(
            ("Emails", "emails"),
            ("Customer IDs", "ids"),
            ("Per-User Data", "per_user_data"),
            ("Data File URL", "data_file_url"),
        ),
        default="emails",
        description="How recipients of the broadcast are specified",
        display_options=show(RESOURCE, ["trigger_broadcast"]),
    ),
    NodeProperty(
        display_name="Emails",
        name="emails",
        type=PropertyType.STRING,
        required=True,
        default="",
        placeholder="a@example.com,b@example.com",
        description="Comma-separated email addresses",
        display_options=_for_recipients("emails"),
    ),
    NodeProperty(
        display_name="Customer IDs",
        name="customer_ids",
        type=PropertyType.STRING,
        required=True,
        default="",
        placeholder="id1,id2,id3",
        description="Comma-separated customer IDs",
        display_options=_for_recipients("ids"),
    ),
    NodeProperty(
        display_name="Per-User Data",
        name="per_user_data",
        type=PropertyType.JSON,
        required=True,
        default='[\n  {\n    "id": "customer_1",\n    "data": {\n      "first_name": "John"\n    }\n  }\n]',
        description="JSON array of recipients with per-recipient data",
        display_options=_for_recipients("per_user_data"),
    ),
    NodeProperty(
        display_name="Data File URL",
        name="data_file_url",
        type=PropertyType.STRING,
        required=True,
        default="",
        description="URL of a JSON-lines file describing the recipients",
        display_options=_for_recipients("data_file_url"),
    ),
    NodeProperty(
        display_name="Trigger Options",
        name="trigger_options",
        type=PropertyType.COLLECTION,
        default={},
        placeholder="Add Option",
        display_options=show(RESOURCE, ["trigger_broadcast"]),
        children=[
            NodeProperty(display_name="Ignore Missing IDs", name="id_ignore_missing", type=PropertyType.BOOLEAN,
                         default=False, description="Whether to skip customer IDs that do not exist"),
            NodeProperty(display_name="Add Duplicate Emails", name="email_add_duplicates", type=PropertyType.BOOLEAN,
                         default=False, description="Whether to send to every profile sharing an email"),
            NodeProperty(display_name="Ignore Missing Emails", name="email_ignore_missing", type=PropertyType.BOOLEAN,
                         default=False, description="Whether to skip emails without a profile"),
        ],
    ),
    key_value_collection("broadcast_data_ui", "Broadcast Data", RESOURCE, ["trigger_broadcast"], item_display_name="Data"),
    metric_options_property(RESOURCE, ["get_broadcast_metrics"]),
    return_all_property(RESOURCE, ["list_broadcast_triggers"]),
    limit_property(RESOURCE, ["list_broadcast_triggers"]),
]


async def list_broadcasts(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    return await client.request("GET", "/broadcasts", api_type=ApiType.APP)


async def get_broadcast(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    broadcast_id = ctx.get_node_parameter("broadcast_id", index)
    return await client.request("GET", f"/broadcasts/{broadcast_id}", api_type=ApiType.APP)


async def create_broadcast(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    name = ctx.get_node_parameter("name", index)
    trigger_type = ctx.get_node_parameter("trigger_type", index, "api")
    options = ctx.get_node_parameter("broadcast_options", index, {})

    body = {"name": name, "type": trigger_type}
    if options.get("data_type_identifier"):
        body["data_type_identifier"] = options["data_type_identifier"]

    return await client.request("POST", "/broadcasts", clean_object(body), api_type=ApiType.APP)


async def trigger_broadcast(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    """Trigger an API broadcast for one recipient source: emails, ids, per-user data or a data file."""
    broadcast_id = ctx.get_node_parameter("broadcast_id", index)
    recipient_type = ctx.get_node_parameter("recipient_type", index, "emails")
    options = ctx.get_node_parameter("trigger_options", index, {})

    body = {}
    if recipient_type == "emails":
        body["emails"] = split_list(ctx.get_node_parameter("emails", index))
    elif recipient_type == "ids":
        body["ids"] = split_list(ctx.get_node_parameter("customer_ids", index))
    elif recipient_type == "per_user_data":
        body["per_user_data"] = parse_json(
            ctx.get_node_parameter("per_user_data", index), "Invalid JSON in per-user data", expected=list,
        )
    elif recipient_type == "data_file_url":
        body["data_file_url"] = ctx.get_node_parameter("data_file_url", index)

    for flag in _TRIGGER_FLAGS:
        if flag in options:
            body[flag] = options[flag]

    data = prepare_attributes(ctx.get_node_parameter("broadcast_data_ui", index, {}))
    if data:
        body["data"] = data

    return await client.request(
        "POST", f"/campaigns/{broadcast_id}/triggers", clean_object(body), api_type=ApiType.APP,
    )


async def get_broadcast_metrics(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    broadcast_id = ctx.get_node_parameter("broadcast_id", index)
    query = metric_query(ctx.get_node_parameter("metric_options", index, {}))
    return await client.request("GET", f"/broadcasts/{broadcast_id}/metrics", query=query, api_type=ApiType.APP)


async def get_broadcast_actions(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    broadcast_id = ctx.get_node_parameter("broadcast_id", index)
    return await client.request("GET", f"/broadcasts/{broadcast_id}/actions", api_type=ApiType.APP)


async def list_broadcast_triggers(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    broadcast_id = ctx.get_node_parameter("broadcast_id", index)
    return await list_or_page(ctx, client, index, f"/broadcasts/{broadcast_id}/triggers", "triggers")


resource = Resource(
    name=RESOURCE,
    display_name="Broadcasts",
    description="Create and trigger one-off broadcasts",
    operations=OPERATIONS,
    fields=FIELDS,
    handlers={
        "list_broadcasts": list_broadcasts,
        "get_broadcast": get_broadcast,
        "create_broadcast": create_broadcast,
        "trigger_broadcast": trigger_broadcast,
        "get_broadcast_metrics": get_broadcast_metrics,
        "get_broadcast_actions": get_broadcast_actions,
        "list_broadcast_triggers": list_broadcast_triggers,
    },
)
execute = resource.execute
