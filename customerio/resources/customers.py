"""Customers: read profiles, activity and messages (App API); search on the Beta API."""
from __future__ import annotations
from typing import Any

from customerio.constants import ACTIVITY_TYPES, DEFAULT_LIST_LIMIT
from customerio.context import ExecutionContext
from customerio.helpers import parse_json, prepare_filters, split_list
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

RESOURCE = "customers"

_PAGED = ["list_customers", "search_customers", "get_customer_messages", "get_customer_activities"]
_BY_ID = [
    "get_customer",
    "get_customer_attributes",
    "get_customer_segments",
    "get_customer_messages",
    "get_customer_activities",
]

OPERATIONS = [
    operation_property(
        RESOURCE,
        [
            PropertyOption(name="Export", value="export_customers", description="Export customer data", action="Export customers"),
            PropertyOption(name="Get", value="get_customer", description="Get a customer by ID", action="Get a customer"),
            PropertyOption(name="Get Activities", value="get_customer_activities", description="Get activities for a customer", action="Get customer activities"),
            PropertyOption(name="Get Attributes", value="get_customer_attributes", description="Get attributes for a customer", action="Get customer attributes"),
            PropertyOption(name="Get Messages", value="get_customer_messages", description="Get messages sent to a customer", action="Get customer messages"),
            PropertyOption(name="Get Segments", value="get_customer_segments", description="Get segments a customer belongs to", action="Get customer segments"),
            PropertyOption(name="List", value="list_customers", description="List customers", action="List customers"),
            PropertyOption(name="Search", value="search_customers", description="Search customers by filter", action="Search customers"),
        ],
        default="list_customers",
    )
]

FIELDS = [
    NodeProperty(
        display_name="Customer ID",
        name="customer_id",
        type=PropertyType.STRING,
        required=True,
        default="",
        description="The customer identifier",
        display_options=show(RESOURCE, _BY_ID),
    ),
    return_all_property(RESOURCE, _PAGED),
    limit_property(RESOURCE, _PAGED),
    NodeProperty(
        display_name="Filters",
        name="filters",
        type=PropertyType.COLLECTION,
        default={},
        placeholder="Add Filter",
        display_options=show(RESOURCE, ["list_customers"]),
        children=[
            NodeProperty(display_name="Email", name="email", type=PropertyType.STRING, default="",
                         description="Filter by email address"),
        ],
    ),
    NodeProperty(
        display_name="Search Query",
        name="search_query",
        type=PropertyType.JSON,
        required=True,
        default='{"filter": {"and": [{"attribute": {"field": "email", "operator": "exists"}}]}}',
        description="Filter object in Customer.io search syntax",
        display_options=show(RESOURCE, ["search_customers"]),
    ),
    NodeProperty(
        display_name="Customer IDs",
        name="customer_ids",
        type=PropertyType.STRING,
        required=True,
        default="",
        placeholder="id1,id2,id3",
        description="Comma-separated customer IDs to export",
        display_options=show(RESOURCE, ["export_customers"]),
    ),
    NodeProperty(
        display_name="Activity Type",
        name="activity_type",
        type=PropertyType.OPTIONS,
        default="",
        options=[
            PropertyOption(name="All", value=""),
            *(PropertyOption(name=humanize(value), value=value) for value in ACTIVITY_TYPES),
        ],
        description="Only return activities of this type",
        display_options=show(RESOURCE, ["get_customer_activities"]),
    ),
]


async def list_customers(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    query = prepare_filters(ctx.get_node_parameter("filters", index, {}))
    return await list_or_page(ctx, client, index, "/customers", "customers", query=query)


async def get_customer(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    customer_id = ctx.get_node_parameter("customer_id", index)
    return await client.request("GET", f"/customers/{encode(customer_id)}", api_type=ApiType.APP)


async def search_customers(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    """Search with a Beta API filter document; pages follow ``identifiers``."""
    query = parse_json(ctx.get_node_parameter("search_query", index), "Invalid JSON in search query", expected=dict)
    if ctx.get_node_parameter("return_all", index, False):
        return await client.request_all_items(
            "POST", "/customers", query, api_type=ApiType.BETA, property_name="identifiers",
        )
    body = {**query, "limit": ctx.get_node_parameter("limit", index, DEFAULT_LIST_LIMIT)}
    return await client.request("POST", "/customers", body, api_type=ApiType.BETA)


async def get_customer_attributes(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    customer_id = ctx.get_node_parameter("customer_id", index)
    return await client.request("GET", f"/customers/{encode(customer_id)}/attributes", api_type=ApiType.APP)


async def get_customer_segments(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    customer_id = ctx.get_node_parameter("customer_id", index)
    return await client.request("GET", f"/customers/{encode(customer_id)}/segments", api_type=ApiType.APP)


async def get_customer_messages(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    customer_id = ctx.get_node_parameter("customer_id", index)
    return await list_or_page(ctx, client, index, f"/customers/{encode(customer_id)}/messages", "messages")


async def get_customer_activities(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    customer_id = ctx.get_node_parameter("customer_id", index)
    activity_type = ctx.get_node_parameter("activity_type", index, "")
    query = {"type": activity_type} if activity_type else {}
    return await list_or_page(
        ctx, client, index, f"/customers/{encode(customer_id)}/activities", "activities", query=query,
    )


async def export_customers(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    ids = split_list(ctx.get_node_parameter("customer_ids", index))
    return await client.request("POST", "/exports/customers", {"ids": ids}, api_type=ApiType.APP)


resource = Resource(
    name=RESOURCE,
    display_name="Customers",
    description="Look up and search customer profiles",
    operations=OPERATIONS,
    fields=FIELDS,
    handlers={
        "list_customers": list_customers,
        "get_customer": get_customer,
        "search_customers": search_customers,
        "get_customer_attributes": get_customer_attributes,
        "get_customer_segments": get_customer_segments,
        "get_customer_messages": get_customer_messages,
        "get_customer_activities": get_customer_activities,
        "export_customers": export_customers,
    },
)
execute = resource.execute
