"""Objects: non-person entities such as companies and their relationships (Track API)."""
from __future__ import annotations
from typing import Any

from customerio.context import ExecutionContext
from customerio.helpers import clean_object, prepare_object_attributes
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

RESOURCE = "objects"

_ALL = ["identify_object", "delete_object", "add_relationship", "remove_relationship"]
_RELATIONSHIPS = ["add_relationship", "remove_relationship"]

OPERATIONS = [
    operation_property(
        RESOURCE,
        [
            PropertyOption(name="Add Relationship", value="add_relationship", description="Relate a person to an object", action="Add a relationship"),
            PropertyOption(name="Delete", value="delete_object", description="Delete an object", action="Delete an object"),
            PropertyOption(name="Identify", value="identify_object", description="Create or update an object", action="Identify an object"),
            PropertyOption(name="Remove Relationship", value="remove_relationship", description="Remove a person from an object", action="Remove a relationship"),
        ],
        default="identify_object",
    )
]

FIELDS = [
    NodeProperty(
        display_name="Object Type",
        name="object_type",
        type=PropertyType.STRING,
        required=True,
        default="",
        placeholder="company",
        description="The type of object (e.g. company, account, course)",
        display_options=show(RESOURCE, _ALL),
    ),
    NodeProperty(
        display_name="Object ID",
        name="object_id",
        type=PropertyType.STRING,
        required=True,
        default="",
        description="The unique identifier for the object",
        display_options=show(RESOURCE, _ALL),
    ),
    key_value_collection("object_attributes_ui", "Object Attributes", RESOURCE, ["identify_object"]),
    NodeProperty(
        display_name="Person Identifier",
        name="person_identifier",
        type=PropertyType.STRING,
        required=True,
        default="",
        description="The person to relate to the object",
        display_options=show(RESOURCE, _RELATIONSHIPS),
    ),
    NodeProperty(
        display_name="Identifier Type",
        name="identifier_type",
        type=PropertyType.OPTIONS,
        options=choices(("ID", "id"), ("Email", "email"), ("CIO ID", "cio_id")),
        default="id",
        description="What kind of identifier the person identifier is",
        display_options=show(RESOURCE, _RELATIONSHIPS),
    ),
    key_value_collection("relationship_attributes_ui", "Relationship Attributes", RESOURCE, ["add_relationship"]),
]


def relationship_body(identifier_type: str, person: str, object_type: str, object_id: str) -> dict:
    return {
        "identifiers": {identifier_type: person},
        "relationship": {"identifiers": {"object_type_id": object_type, "object_id": object_id}},
    }


async def identify_object(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    object_type = ctx.get_node_parameter("object_type", index)
    object_id = ctx.get_node_parameter("object_id", index)
    body = prepare_object_attributes(ctx.get_node_parameter("object_attributes_ui", index, {}))

    response = await client.request(
        "PUT", f"/objects/{encode(object_type)}/{encode(object_id)}", clean_object(body), api_type=ApiType.TRACK,
    )
    return acknowledge(response, object_type=object_type, object_id=object_id)


async def delete_object(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    object_type = ctx.get_node_parameter("object_type", index)
    object_id = ctx.get_node_parameter("object_id", index)
    response = await client.request(
        "DELETE", f"/objects/{encode(object_type)}/{encode(object_id)}", api_type=ApiType.TRACK,
    )
    return acknowledge(response, deleted=f"{object_type}/{object_id}")


async def add_relationship(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    object_type = ctx.get_node_parameter("object_type", index)
    object_id = ctx.get_node_parameter("object_id", index)
    person = ctx.get_node_parameter("person_identifier", index)
    identifier_type = ctx.get_node_parameter("identifier_type", index, "id")

    body = relationship_body(identifier_type, person, object_type, object_id)
    attributes = prepare_object_attributes(ctx.get_node_parameter("relationship_attributes_ui", index, {}))
    if attributes:
        body["relationship"]["relationship_attributes"] = attributes

    response = await client.request(
        "POST", f"/customers/{encode(person)}/relationships", clean_object(body), api_type=ApiType.TRACK,
    )
    return acknowledge(response, person_identifier=person, object_type=object_type, object_id=object_id)


async def remove_relationship(ctx: ExecutionContext, client: CustomerIoClient, index: int) -> Any:
    """Unlink a person from an object. The empty Track response becomes ``removed=True``."""
    object_type = ctx.get_node_parameter("object_type", index)
    object_id = ctx.get_node_parameter("object_id", index)
    person = ctx.get_node_parameter("person_identifier", index)
    identifier_type = ctx.get_node_parameter("identifier_type", index, "id")

    body = relationship_body(identifier_type, person, object_type, object_id)
    response = await client.request(
        "DELETE", f"/customers/{encode(person)}/relationships", clean_object(body), api_type=ApiType.TRACK,
    )
    return acknowledge(
        response, removed=True, person_identifier=person, object_type=object_type, object_id=object_id,
    )


resource = Resource(
    name=RESOURCE,
    display_name="Objects",
    description="Manage objects and their relationships to people",
    operations=OPERATIONS,
    fields=FIELDS,
    handlers={
        "identify_object": identify_object,
        "delete_object": delete_object,
        "add_relationship": add_relationship,
        "remove_relationship": remove_relationship,
    },
)
execute = resource.execute
