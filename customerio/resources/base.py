"""Shared plumbing for resource modules.

A resource module exposes ``RESOURCE``, ``OPERATIONS``, ``FIELDS`` and an
``execute(ctx, client, index)`` coroutine. ``Resource`` bundles those with
an operation -> handler table so dispatch is uniform across resources.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import quote

from customerio.constants import DEFAULT_LIST_LIMIT
from customerio.context import ExecutionContext
from customerio.errors import NodeOperationError
from customerio.properties import NodeProperty
from customerio.transport import ApiType, CustomerIoClient

Handler = Callable[[ExecutionContext, CustomerIoClient, int], Awaitable[Any]]


def encode(value: Any) -> str:
    """Percent-encode a user-supplied path segment."""
    return quote(str(value), safe="!'()*")


def acknowledge(response: Any, **ack: Any) -> dict[str, Any]:
    """Track API writes answer with an empty body; replace it with an ack."""
    if response:
        return response
    return {"success": True, **ack}


def as_items(response: Any, scalar_key: str = "value") -> list[dict[str, Any]]:
    """Normalize a response into a list of JSON objects."""
    if isinstance(response, list):
        return [item if isinstance(item, dict) else {scalar_key: item} for item in response]
    if isinstance(response, dict):
        return [response]
    return [{scalar_key: response}]


async def list_or_page(
    ctx: ExecutionContext,
    client: CustomerIoClient,
    index: int,
    endpoint: str,
    property_name: str,
    query: Optional[dict[str, Any]] = None,
    api_type: ApiType = ApiType.APP,
) -> Any:
    """``return_all`` walks every page; otherwise one page capped at ``limit``."""
    query = dict(query or {})
    if ctx.get_node_parameter("return_all", index, False):
        return await client.request_all_items(
            "GET", endpoint, query=query, api_type=api_type, property_name=property_name,
        )
    query["limit"] = ctx.get_node_parameter("limit", index, DEFAULT_LIST_LIMIT)
    return await client.request("GET", endpoint, query=query, api_type=api_type)


def metric_query(options: Optional[dict[str, Any]], keys: tuple = ("period", "steps")) -> dict[str, Any]:
    """Pick the set metric options (period, steps, ...) for the query string."""
    options = options or {}
    return {key: options[key] for key in keys if options.get(key)}


@dataclass
class Resource:
    name: str
    display_name: str
    description: str
    operations: list[NodeProperty]
    fields: list[NodeProperty]
    handlers: dict[str, Handler] = field(default_factory=dict)
    scalar_key: str = "value"

    @property
    def properties(self) -> list[NodeProperty]:
        return [*self.operations, *self.fields]

    @property
    def operation_names(self) -> list[str]:
        return list(self.handlers)

    async def execute(self, ctx: ExecutionContext, client: CustomerIoClient, index: int) -> list[dict[str, Any]]:
        operation = ctx.get_node_parameter("operation", index)
        handler = self.handlers.get(operation)
        if handler is None:
            raise NodeOperationError(
                f'Operation "{operation}" is not supported for {self.display_name} resource'
            )
        return as_items(await handler(ctx, client, index), scalar_key=self.scalar_key)