"""Segments: list segments and read membership (App API)."""
from __future__ import annotations
from typing import Any

from customerio.context import ExecutionContext
from customerio.properties import (
    NodeProperty,
    PropertyOption,
    PropertyType,
    limit_property,
    operation_property,
    return_all_property,
    show,
)
from customerio.resources.base import Resource, list_or_page
from customerio.transport import ApiType, CustomerIoClient

RESOURCE = "segments"

OPERATIONS = [
    operation_property(
        RESOURCE,
        [
            PropertyOption(name="Get", value="get_segment", description="Get a segment", action="Get a segment"),
            PropertyOption(name="Get Membership", value="get_segment_membership", description="Get the people in a segment", action="Get segment membership"),
            PropertyOption(name="List", value="list_segments", description="List all segments", action="List segments"),
        ],
        default="list_segments",
    )
]

FIELDS = [
    NodeProperty(
        display_name="Segment ID",
        name="segment_id",
        type=PropertyType.NUMBER,
        required=True,
        default=0,
        description="The ID of the segment",
        display_options=show(RESOURCE, ["get_segment", "get_segment_membership"]),
    ),
    return_all_property(RESOURCE, ["get_segment_membership"]),
    limit_property(RESOURCE, ["get_segment_membership"]),
]


async def list_segments(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    return await client.request("GET", "/segments", api_type=ApiType.APP)


async def get_segment(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    segment_id = ctx.get_node_parameter("segment_id", index)
    return await client.request("GET", f"/segments/{segment_id}", api_type=ApiType.APP)


async def get_segment_membership(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    segment_id = ctx.get_node_parameter("segment_id", index)
    return await list_or_page(ctx, client, index, f"/segments/{segment_id}/membership", "ids")


resource = Resource(
    name=RESOURCE,
    display_name="Segments",
    description="View segments and membership",
    operations=OPERATIONS,
    fields=FIELDS,
    handlers={
        "list_segments": list_segments,
        "get_segment": get_segment,
        "get_segment_membership": get_segment_membership,
    },
    scalar_key="id",
)
execute = resource.execute
