"""
Customer.io action node.

Maps the selected resource + operation onto one Customer.io API call per
input item and returns the results as output items paired with their input.
"""
from __future__ import annotations
from typing import Optional
import logging

from customerio.context import ExecutionContext, ExecutionItem
from customerio.credentials import CREDENTIAL_NAME
from customerio.errors import CustomerIoError, NodeOperationError
from customerio.properties import NodeDescription, NodeProperty, PropertyOption, PropertyType
from customerio.resources import RESOURCES
from customerio.transport import CustomerIoClient

logger = logging.getLogger(__name__)

DEFAULT_RESOURCE = "people"


def _resource_property() -> NodeProperty:
    return NodeProperty(
        display_name="Resource",
        name="resource",
        type=PropertyType.OPTIONS,
        options=[
            PropertyOption(name=resource.display_name, value=resource.name, description=resource.description)
            for resource in RESOURCES.values()
        ],
        default=DEFAULT_RESOURCE,
    )


class CustomerIoNode:
    """Consume the Customer.io Track, App, Pipelines and Beta APIs."""

    def __init__(self):
        properties = [_resource_property()]
        for resource in RESOURCES.values():
            properties.extend(resource.properties)

        self.description = NodeDescription(
            display_name="Customer.io",
            name="customer_io",
            description="Consume the Customer.io API",
            group=["transform"],
            credentials=[CREDENTIAL_NAME],
            properties=properties,
        )

    async def execute(
        self,
        ctx: ExecutionContext,
        client: Optional[CustomerIoClient] = None,
    ) -> list[ExecutionItem]:
        items = ctx.get_input_data()
        resource_name = ctx.get_node_parameter("resource", 0)

        owns_client = client is None
        if owns_client:
            client = CustomerIoClient(ctx.credentials)

        results: list[ExecutionItem] = []
        try:
            for index in range(len(items)):
                try:
                    resource = RESOURCES.get(resource_name)
                    if resource is None:
                        raise NodeOperationError(f"Unknown resource: {resource_name}")
                    data = await resource.execute(ctx, client, index)
                except CustomerIoError as exc:
                    if not ctx.continue_on_fail:
                        raise
                    logger.warning("Customer.io %s item %d failed: %s", resource_name, index, exc)
                    results.append(ExecutionItem({"error": str(exc)}, paired_item=index))
                    continue
                results.extend(ExecutionItem(entry, paired_item=index) for entry in data)
        finally:
            if owns_client:
                await client.aclose()

        return results
