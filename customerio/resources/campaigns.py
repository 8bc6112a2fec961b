"""Campaigns: read automated campaign workflows and their metrics (App API)."""
from __future__ import annotations
from typing import Any

from customerio.context import ExecutionContext
from customerio.properties import (
    NodeProperty,
    PropertyOption,
    PropertyType,
    limit_property,
    metric_options_property,
    operation_property,
    return_all_property,
    show,
)
from customerio.resources.base import Resource, list_or_page, metric_query
from customerio.transport import ApiType, CustomerIoClient

RESOURCE = "campaigns"

OPERATIONS = [
    operation_property(
        RESOURCE,
        [
            PropertyOption(name="Get", value="get_campaign", description="Get a campaign", action="Get a campaign"),
            PropertyOption(name="Get Actions", value="get_campaign_actions", description="Get the actions of a campaign", action="Get campaign actions"),
            PropertyOption(name="Get Messages", value="list_campaign_messages", description="List messages sent by a campaign", action="Get campaign messages"),
            PropertyOption(name="Get Metrics", value="get_campaign_metrics", description="Get metrics for a campaign", action="Get campaign metrics"),
            PropertyOption(name="Get Triggers", value="get_campaign_triggers", description="Get the triggers of a campaign", action="Get campaign triggers"),
            PropertyOption(name="List", value="list_campaigns", description="List all campaigns", action="List campaigns"),
        ],
        default="list_campaigns",
    )
]

FIELDS = [
    NodeProperty(
        display_name="Campaign ID",
        name="campaign_id",
        type=PropertyType.NUMBER,
        required=True,
        default=0,
        description="The ID of the campaign",
        display_options=show(
            RESOURCE,
            ["get_campaign", "get_campaign_metrics", "get_campaign_actions", "get_campaign_triggers", "list_campaign_messages"],
        ),
    ),
    metric_options_property(RESOURCE, ["get_campaign_metrics"], with_type=True),
    return_all_property(RESOURCE, ["list_campaign_messages"]),
    limit_property(RESOURCE, ["list_campaign_messages"]),
]


async def list_campaigns(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    return await client.request("GET", "/campaigns", api_type=ApiType.APP)


async def get_campaign(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    campaign_id = ctx.get_node_parameter("campaign_id", index)
    return await client.request("GET", f"/campaigns/{campaign_id}", api_type=ApiType.APP)


async def get_campaign_metrics(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    campaign_id = ctx.get_node_parameter("campaign_id", index)
    options = ctx.get_node_parameter("metric_options", index, {})
    query = metric_query(options, ("period", "steps", "type"))
    return await client.request("GET", f"/campaigns/{campaign_id}/metrics", query=query, api_type=ApiType.APP)


async def get_campaign_actions(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    campaign_id = ctx.get_node_parameter("campaign_id", index)
    return await client.request("GET", f"/campaigns/{campaign_id}/actions", api_type=ApiType.APP)


async def get_campaign_triggers(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    campaign_id = ctx.get_node_parameter("campaign_id", index)
    return await client.request("GET", f"/campaigns/{campaign_id}/triggers", api_type=ApiType.APP)


async def list_campaign_messages(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    campaign_id = ctx.get_node_parameter("campaign_id", index)
    return await list_or_page(ctx, client, index, f"/campaigns/{campaign_id}/messages", "messages")


resource = Resource(
    name=RESOURCE,
    display_name="Campaigns",
    description="Manage automated campaign workflows",
    operations=OPERATIONS,
    fields=FIELDS,
    handlers={
        "list_campaigns": list_campaigns,
        "get_campaign": get_campaign,
        "get_campaign_metrics": get_campaign_metrics,
        "get_campaign_actions": get_campaign_actions,
        "get_campaign_triggers": get_campaign_triggers,
        "list_campaign_messages": list_campaign_messages,
    },
)
execute = resource.execute
