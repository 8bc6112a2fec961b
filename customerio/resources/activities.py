"""Activities: the workspace activity log (App API)."""
from __future__ import annotations
from typing import Any

from customerio.constants import ACTIVITY_TYPES
from customerio.context import ExecutionContext
from customerio.helpers import format_timestamp
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

RESOURCE = "activities"

OPERATIONS = [
    operation_property(
        RESOURCE,
        [
            PropertyOption(name="Get", value="get_activity", description="Get an activity", action="Get an activity"),
            PropertyOption(name="List", value="list_activities", description="List activities", action="List activities"),
        ],
        default="list_activities",
    )
]

FIELDS = [
    NodeProperty(
        display_name="Activity ID",
        name="activity_id",
        type=PropertyType.STRING,
        required=True,
        default="",
        description="The ID of the activity",
        display_options=show(RESOURCE, ["get_activity"]),
    ),
    return_all_property(RESOURCE, ["list_activities"]),
    limit_property(RESOURCE, ["list_activities"]),
    NodeProperty(
        display_name="Filters",
        name="filters",
        type=PropertyType.COLLECTION,
        default={},
        placeholder="Add Filter",
        display_options=show(RESOURCE, ["list_activities"]),
        children=[
            NodeProperty(display_name="Customer ID", name="customer_id", type=PropertyType.STRING, default="",
                         description="Only activities of this customer"),
            NodeProperty(display_name="Deleted", name="deleted", type=PropertyType.BOOLEAN, default=False,
                         description="Whether to include deleted people"),
            NodeProperty(display_name="End", name="end", type=PropertyType.DATE_TIME, default="",
                         description="Only activities before this time"),
            NodeProperty(display_name="Name", name="name", type=PropertyType.STRING, default="",
                         description="Event or attribute name"),
            NodeProperty(display_name="Start", name="start", type=PropertyType.DATE_TIME, default="",
                         description="Only activities after this time"),
            NodeProperty(
                display_name="Type",
                name="type",
                type=PropertyType.OPTIONS,
                default="",
                options=[
                    PropertyOption(name="All", value=""),
                    *sorted(
                        (PropertyOption(name=humanize(value), value=value) for value in ACTIVITY_TYPES),
                        key=lambda option: option.name,
                    ),
                ],
                description="Only activities of this type",
            ),
        ],
    ),
]


def activity_filters(filters: dict) -> dict:
    query = {}
    for key in ("customer_id", "type", "name"):
        if filters.get(key):
            query[key] = filters[key]
    if "deleted" in filters:
        query["deleted"] = filters["deleted"]
    for key in ("start", "end"):
        if filters.get(key):
            query[key] = format_timestamp(filters[key])
    return query


async def list_activities(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    query = activity_filters(ctx.get_node_parameter("filters", index, {}))
    return await list_or_page(ctx, client, index, "/activities", "activities", query=query)


async def get_activity(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    activity_id = ctx.get_node_parameter("activity_id", index)
    return await client.request("GET", f"/activities/{encode(activity_id)}", api_type=ApiType.APP)


resource = Resource(
    name=RESOURCE,
    display_name="Activities",
    description="Browse the activity log",
    operations=OPERATIONS,
    fields=FIELDS,
    handlers={
        "list_activities": list_activities,
        "get_activity": get_activity,
    },
)
execute = resource.execute
