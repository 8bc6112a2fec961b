"""Exports: create and download customer and delivery exports (App API)."""
from __future__ import annotations
from typing import Any

from customerio.constants import EXPORT_TYPES
from customerio.context import ExecutionContext
from customerio.helpers import clean_object, parse_json_lenient, split_list
from customerio.properties import (
    DisplayOptions,
    NodeProperty,
    PropertyOption,
    PropertyType,
    humanize,
    limit_property,
    operation_property,
    return_all_property,
    show,
)
from customerio.resources.base import Resource, list_or_page
from customerio.transport import ApiType, CustomerIoClient

RESOURCE = "exports"


def _for_export(export_type: str) -> DisplayOptions:
    return DisplayOptions(
        show={"resource": [RESOURCE], "operation": ["create_export"], "export_type": [export_type]},
    )


OPERATIONS = [
    operation_property(
        RESOURCE,
        [
            PropertyOption(name="Create", value="create_export", description="Start a new export", action="Create an export"),
            PropertyOption(name="Download", value="download_export", description="Get a download link for an export", action="Download an export"),
            PropertyOption(name="Get", value="get_export", description="Get an export", action="Get an export"),
            PropertyOption(name="List", value="list_exports", description="List all exports", action="List exports"),
        ],
        default="list_exports",
    )
]

FIELDS = [
    NodeProperty(
        display_name="Export Type",
        name="export_type",
        type=PropertyType.OPTIONS,
        required=True,
        options=[PropertyOption(name=humanize(value), value=value) for value in EXPORT_TYPES],
        default="customers",
        description="What to export",
        display_options=show(RESOURCE, ["create_export"]),
    ),
    NodeProperty(
        display_name="Customer IDs",
        name="customer_ids",
        type=PropertyType.STRING,
        default="",
        placeholder="id1,id2,id3",
        description="Comma-separated customer IDs to export",
        display_options=_for_export("customers"),
    ),
    NodeProperty(
        display_name="Segment ID",
        name="segment_id",
        type=PropertyType.NUMBER,
        default=0,
        description="Export the members of this segment",
        display_options=_for_export("customers"),
    ),
    NodeProperty(
        display_name="Filter",
        name="filter",
        type=PropertyType.JSON,
        default="{}",
        description="Delivery filter object",
        display_options=_for_export("deliveries"),
    ),
    NodeProperty(
        display_name="Newsletter ID",
        name="newsletter_id",
        type=PropertyType.NUMBER,
        required=True,
        default=0,
        description="Export the deliveries of this newsletter",
        display_options=_for_export("newsletter_deliveries"),
    ),
    NodeProperty(
        display_name="Export ID",
        name="export_id",
        type=PropertyType.NUMBER,
        required=True,
        default=0,
        description="The ID of the export",
        display_options=show(RESOURCE, ["get_export", "download_export"]),
    ),
    return_all_property(RESOURCE, ["list_exports"]),
    limit_property(RESOURCE, ["list_exports"]),
]


async def list_exports(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    return await list_or_page(ctx, client, index, "/exports", "exports")


async def get_export(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    export_id = ctx.get_node_parameter("export_id", index)
    return await client.request("GET", f"/exports/{export_id}", api_type=ApiType.APP)


async def create_export(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    """Start a customer, delivery or newsletter export. Unparsable delivery filters are dropped."""
    export_type = ctx.get_node_parameter("export_type", index, "customers")
    body = {}

    if export_type == "customers":
        endpoint = "/exports/customers"
        customer_ids = ctx.get_node_parameter("customer_ids", index, "")
        segment_id = ctx.get_node_parameter("segment_id", index, 0)
        if customer_ids:
            body["ids"] = split_list(customer_ids)
        if segment_id:
            body["segment"] = {"id": segment_id}
    elif export_type == "deliveries":
        endpoint = "/exports/deliveries"
        filters = parse_json_lenient(ctx.get_node_parameter("filter", index, "{}"), fallback={})
        if isinstance(filters, dict) and filters:
            body["filters"] = filters
    else:
        endpoint = "/exports/deliveries"
        body["newsletter_id"] = ctx.get_node_parameter("newsletter_id", index)

    return await client.request("POST", endpoint, clean_object(body), api_type=ApiType.APP)


async def download_export(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    export_id = ctx.get_node_parameter("export_id", index)
    return await client.request("GET", f"/exports/{export_id}/download", api_type=ApiType.APP)


resource = Resource(
    name=RESOURCE,
    display_name="Exports",
    description="Export customer and delivery data",
    operations=OPERATIONS,
    fields=FIELDS,
    handlers={
        "list_exports": list_exports,
        "get_export": get_export,
        "create_export": create_export,
        "download_export": download_export,
    },
)
execute = resource.execute
