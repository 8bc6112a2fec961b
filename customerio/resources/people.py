"""People: create, update and delete customer profiles and devices (Track API)."""
from __future__ import annotations
from typing import Any

from customerio.context import ExecutionContext
from customerio.helpers import clean_object, format_timestamp, parse_json_lenient, prepare_attributes
from customerio.properties import (
    NodeProperty,
    PropertyOption,
    PropertyType,
    choices,
    key_value_collection,
    operation_property,
    show,
)
from customerio.resources.base import Resource, acknowledge, encode
from customerio.transport import ApiType, CustomerIoClient

RESOURCE = "people"

OPERATIONS = [
    operation_property(
        RESOURCE,
        [
            PropertyOption(name="Add Device", value="add_device", description="Add a mobile device token to a person", action="Add device to a person"),
            PropertyOption(name="Delete", value="delete_person", description="Delete a person", action="Delete a person"),
            PropertyOption(name="Delete Device", value="delete_device", description="Remove a device token from a person", action="Delete device from a person"),
            PropertyOption(name="Identify", value="identify", description="Create or update a person", action="Identify a person"),
            PropertyOption(name="Merge", value="merge_people", description="Merge two people together", action="Merge people"),
            PropertyOption(name="Suppress", value="suppress", description="Suppress a person to stop all messaging", action="Suppress a person"),
            PropertyOption(name="Unsuppress", value="unsuppress", description="Unsuppress a person to resume messaging", action="Unsuppress a person"),
        ],
        default="identify",
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
        display_options=show(RESOURCE, ["identify", "delete_person", "add_device", "delete_device", "suppress", "unsuppress"]),
    ),
    NodeProperty(
        display_name="Email",
        name="email",
        type=PropertyType.STRING,
        default="",
        placeholder="name@email.com",
        description="The email address of the person",
        display_options=show(RESOURCE, ["identify"]),
    ),
    NodeProperty(
        display_name="Additional Fields",
        name="additional_fields",
        type=PropertyType.COLLECTION,
        default={},
        placeholder="Add Field",
        display_options=show(RESOURCE, ["identify"]),
        children=[
            NodeProperty(display_name="Anonymous ID", name="anonymous_id", type=PropertyType.STRING, default="",
                         description="The anonymous ID to associate with this person"),
            NodeProperty(display_name="Created At", name="created_at", type=PropertyType.DATE_TIME, default="",
                         description="The timestamp when this person was created"),
            NodeProperty(display_name="CIO Subscription Preferences", name="cio_subscription_preferences",
                         type=PropertyType.JSON, default="{}", description="Subscription preferences object"),
            NodeProperty(display_name="Unsubscribed", name="unsubscribed", type=PropertyType.BOOLEAN, default=False,
                         description="Whether the person is unsubscribed from emails"),
        ],
    ),
    key_value_collection("attributes_ui", "Custom Attributes", RESOURCE, ["identify"]),
    NodeProperty(
        display_name="Device ID",
        name="device_id",
        type=PropertyType.STRING,
        required=True,
        default="",
        description="The unique device token",
        display_options=show(RESOURCE, ["add_device", "delete_device"]),
    ),
    NodeProperty(
        display_name="Platform",
        name="platform",
        type=PropertyType.OPTIONS,
        required=True,
        options=choices(("iOS", "ios"), ("Android", "android")),
        default="ios",
        description="The device platform",
        display_options=show(RESOURCE, ["add_device"]),
    ),
    NodeProperty(
        display_name="Device Options",
        name="device_options",
        type=PropertyType.COLLECTION,
        default={},
        placeholder="Add Option",
        display_options=show(RESOURCE, ["add_device"]),
        children=[
            NodeProperty(display_name="Last Used", name="last_used", type=PropertyType.DATE_TIME, default="",
                         description="When the device was last used"),
        ],
    ),
    NodeProperty(
        display_name="Primary ID",
        name="primary_id",
        type=PropertyType.STRING,
        required=True,
        default="",
        description="The person that remains after the merge",
        display_options=show(RESOURCE, ["merge_people"]),
    ),
    NodeProperty(
        display_name="Secondary ID",
        name="secondary_id",
        type=PropertyType.STRING,
        required=True,
        default="",
        description="The person merged into the primary and then deleted",
        display_options=show(RESOURCE, ["merge_people"]),
    ),
]


async def identify(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    identifier = ctx.get_node_parameter("identifier", index)
    email = ctx.get_node_parameter("email", index, "")
    additional = ctx.get_node_parameter("additional_fields", index, {})
    attributes_ui = ctx.get_node_parameter("attributes_ui", index, {})

    body = {}
    if email:
        body["email"] = email
    if additional.get("anonymous_id"):
        body["anonymous_id"] = additional["anonymous_id"]
    if additional.get("created_at"):
        body["created_at"] = format_timestamp(additional["created_at"])
    if additional.get("unsubscribed") is not None:
        body["unsubscribed"] = additional["unsubscribed"]
    if additional.get("cio_subscription_preferences"):
        body["cio_subscription_preferences"] = parse_json_lenient(additional["cio_subscription_preferences"])

    body.update(prepare_attributes(attributes_ui))

    response = await client.request(
        "PUT", f"/customers/{encode(identifier)}", clean_object(body), api_type=ApiType.TRACK,
    )
    return acknowledge(response, identifier=identifier)


async def delete_person(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    identifier = ctx.get_node_parameter("identifier", index)
    response = await client.request("DELETE", f"/customers/{encode(identifier)}", api_type=ApiType.TRACK)
    return acknowledge(response, deleted=identifier)


async def add_device(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    identifier = ctx.get_node_parameter("identifier", index)
    device_id = ctx.get_node_parameter("device_id", index)
    platform = ctx.get_node_parameter("platform", index, "ios")
    device_options = ctx.get_node_parameter("device_options", index, {})

    device = {"id": device_id, "platform": platform}
    if device_options.get("last_used"):
        device["last_used"] = format_timestamp(device_options["last_used"])

    response = await client.request(
        "PUT", f"/customers/{encode(identifier)}/devices", {"device": device}, api_type=ApiType.TRACK,
    )
    return acknowledge(response, identifier=identifier, device_id=device_id)


async def delete_device(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    identifier = ctx.get_node_parameter("identifier", index)
    device_id = ctx.get_node_parameter("device_id", index)
    response = await client.request(
        "DELETE", f"/customers/{encode(identifier)}/devices/{encode(device_id)}", api_type=ApiType.TRACK,
    )
    return acknowledge(response, deleted=device_id)


async def suppress(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    identifier = ctx.get_node_parameter("identifier", index)
    response = await client.request("POST", f"/customers/{encode(identifier)}/suppress", api_type=ApiType.TRACK)
    return acknowledge(response, suppressed=identifier)


async def unsuppress(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    identifier = ctx.get_node_parameter("identifier", index)
    response = await client.request("POST", f"/customers/{encode(identifier)}/unsuppress", api_type=ApiType.TRACK)
    return acknowledge(response, unsuppressed=identifier)


async def merge_people(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    """Merge ``secondary_id`` into ``primary_id``; the secondary profile is deleted."""
    primary_id = ctx.get_node_parameter("primary_id", index)
    secondary_id = ctx.get_node_parameter("secondary_id", index)
    body = {"primary": {"id": primary_id}, "secondary": {"id": secondary_id}}
    response = await client.request("POST", "/merge_customers", body, api_type=ApiType.TRACK)
    return acknowledge(response, primary_id=primary_id, secondary_id=secondary_id)


resource = Resource(
    name=RESOURCE,
    display_name="People",
    description="Manage customer profiles and devices",
    operations=OPERATIONS,
    fields=FIELDS,
    handlers={
        "identify": identify,
        "delete_person": delete_person,
        "add_device": add_device,
        "delete_device": delete_device,
        "suppress": suppress,
        "unsuppress": unsuppress,
        "merge_people": merge_people,
    },
)
execute = resource.execute
