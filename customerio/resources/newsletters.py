"""Newsletters: read newsletters, their contents and metrics (App API)."""
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

RESOURCE = "newsletters"

OPERATIONS = [
    operation_property(
        RESOURCE,
        [
            PropertyOption(name="Get", value="get_newsletter", description="Get a newsletter", action="Get a newsletter"),
            PropertyOption(name="Get Contents", value="get_newsletter_contents", description="Get the content variants of a newsletter", action="Get newsletter contents"),
            PropertyOption(name="Get Metrics", value="get_newsletter_metrics", description="Get metrics for a newsletter", action="Get newsletter metrics"),
            PropertyOption(name="List", value="list_newsletters", description="List all newsletters", action="List newsletters"),
        ],
        default="list_newsletters",
    )
]

FIELDS = [
    NodeProperty(
        display_name="Newsletter ID",
        name="newsletter_id",
        type=PropertyType.NUMBER,
        required=True,
        default=0,
        description="The ID of the newsletter",
        display_options=show(RESOURCE, ["get_newsletter", "get_newsletter_metrics", "get_newsletter_contents"]),
    ),
    metric_options_property(RESOURCE, ["get_newsletter_metrics"]),
    return_all_property(RESOURCE, ["list_newsletters"]),
    limit_property(RESOURCE, ["list_newsletters"]),
]


async def list_newsletters(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    return await list_or_page(ctx, client, index, "/newsletters", "newsletters")


async def get_newsletter(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    newsletter_id = ctx.get_node_parameter("newsletter_id", index)
    return await client.request("GET", f"/newsletters/{newsletter_id}", api_type=ApiType.APP)


async def get_newsletter_metrics(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    newsletter_id = ctx.get_node_parameter("newsletter_id", index)
    query = metric_query(ctx.get_node_parameter("metric_options", index, {}))
    return await client.request("GET", f"/newsletters/{newsletter_id}/metrics", query=query, api_type=ApiType.APP)


async def get_newsletter_contents(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    newsletter_id = ctx.get_node_parameter("newsletter_id", index)
    return await client.request("GET", f"/newsletters/{newsletter_id}/contents", api_type=ApiType.APP)


resource = Resource(
    name=RESOURCE,
    display_name="Newsletters",
    description="View newsletters and their performance",
    operations=OPERATIONS,
    fields=FIELDS,
    handlers={
        "list_newsletters": list_newsletters,
        "get_newsletter": get_newsletter,
        "get_newsletter_metrics": get_newsletter_metrics,
        "get_newsletter_contents": get_newsletter_contents,
    },
)
execute = resource.execute
