"""Execution contract between the host runtime and the node.

The host resolves parameter expressions per input item and injects
credentials; the node only needs read access to both::

    ctx = ExecutionContext(
        credentials=CustomerIoCredentials.from_env(),
        parameters={"resource": "people", "operation": "identify", "identifier": "42"},
    )
    items = await CustomerIoNode().execute(ctx)
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from customerio.credentials import CustomerIoCredentials
from customerio.errors import NodeParameterError


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


@dataclass
class ExecutionItem:
    """One output item, paired with the input item that produced it."""
    data: dict[str, Any]
    paired_item: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"json": self.data, "paired_item": {"item": self.paired_item}}


@dataclass
class ExecutionContext:
    """Per-execution state handed to the node by the host.

    ``parameters`` is either one dict applied to every item or a list with
    one dict per input item.
    """
    credentials: CustomerIoCredentials
    parameters: Union[dict[str, Any], list[dict[str, Any]]] = field(default_factory=dict)
    items: list[dict[str, Any]] = field(default_factory=lambda: [{}])
    continue_on_fail: bool = False

    def get_input_data(self) -> list[dict[str, Any]]:
        return self.items

    def _parameters_for(self, index: int) -> dict[str, Any]:
        if isinstance(self.parameters, dict):
            return self.parameters
        if index < len(self.parameters):
            return self.parameters[index]
        return {}

    def get_node_parameter(self, name: str, index: int, default: Any = MISSING) -> Any:
        parameters = self._parameters_for(index)
        if name in parameters:
            return parameters[name]
        if default is MISSING:
            raise NodeParameterError(name, index)
        return default


@dataclass
class WebhookRequest:
    """An incoming webhook call as seen by the trigger."""
    body: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)
    raw_body: Optional[bytes] = None

    def header(self, name: str) -> Optional[str]:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


@dataclass
class WebhookResponse:
    """Trigger outcome: an HTTP reply plus the items that start a workflow."""
    status_code: int = 200
    body: dict[str, Any] = field(default_factory=lambda: {"received": True})
    workflow_data: list[dict[str, Any]] = field(default_factory=list)

    @property
    def triggered(self) -> bool:
        return bool(self.workflow_data)
