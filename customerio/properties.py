"""Declarative parameter schema.

Every resource module describes its operations and fields as a flat list of
``NodeProperty`` objects. Visibility is driven by ``DisplayOptions`` keyed on
other parameter values (``resource``, ``operation``), which is how the host
renders the form and how ``NodeDescription.visible_properties`` filters it.
"""
from __future__ import annotations
from enum import Enum
from typing import Any, Iterable, Optional

from pydantic import BaseModel, Field

from customerio.constants import MESSAGE_CHANNELS, METRIC_PERIODS


class PropertyType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OPTIONS = "options"
    MULTI_OPTIONS = "multiOptions"
    COLLECTION = "collection"
    FIXED_COLLECTION = "fixedCollection"
    JSON = "json"
    DATE_TIME = "dateTime"


class PropertyOption(BaseModel):
    """One choice of an options / multiOptions property."""
    name: str
    value: Any
    description: str = ""
    action: Optional[str] = None


class DisplayOptions(BaseModel):
    """Show a property only when every listed parameter has one of the values."""
    show: dict[str, list[Any]] = Field(default_factory=dict)

    def matches(self, parameters: dict[str, Any]) -> bool:
        return all(parameters.get(key) in values for key, values in self.show.items())


class PropertyGroup(BaseModel):
    """A repeatable group inside a fixedCollection."""
    name: str
    display_name: str
    values: list[NodeProperty] = Field(default_factory=list)


class NodeProperty(BaseModel):
    display_name: str
    name: str
    type: PropertyType
    default: Any = None
    required: bool = False
    description: str = ""
    placeholder: str = ""
    password: bool = False
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    multiple_values: bool = False
    options: list[PropertyOption] = Field(default_factory=list)
    children: list[NodeProperty] = Field(default_factory=list)
    groups: list[PropertyGroup] = Field(default_factory=list)
    display_options: Optional[DisplayOptions] = None

    def is_visible(self, parameters: dict[str, Any]) -> bool:
        return self.display_options is None or self.display_options.matches(parameters)

    def option_values(self) -> list[Any]:
        return [option.value for option in self.options]


PropertyGroup.model_rebuild()
NodeProperty.model_rebuild()


class NodeDescription(BaseModel):
    """Node metadata plus its full property list."""
    display_name: str
    name: str
    description: str
    group: list[str] = Field(default_factory=list)
    version: int = 1
    credentials: list[str] = Field(default_factory=list)
    webhooks: list[dict[str, Any]] = Field(default_factory=list)
    properties: list[NodeProperty] = Field(default_factory=list)

    def get_property(self, name: str, parameters: Optional[dict[str, Any]] = None) -> Optional[NodeProperty]:
        """First property called ``name`` that is visible for ``parameters``."""
        for prop in self.properties:
            if prop.name == name and (parameters is None or prop.is_visible(parameters)):
                return prop
        return None

    def visible_properties(self, parameters: dict[str, Any]) -> list[NodeProperty]:
        return [prop for prop in self.properties if prop.is_visible(parameters)]


# ---------------------------------------------------------------------------
# Table builders
# ---------------------------------------------------------------------------

def choices(*pairs: tuple) -> list[PropertyOption]:
    """Build options from ``(name, value)`` or ``(name, value, description)`` tuples."""
    return [PropertyOption(name=p[0], value=p[1], description=p[2] if len(p) > 2 else "") for p in pairs]


def show(resource: str, operations: Optional[Iterable[str]] = None) -> DisplayOptions:
    rules: dict[str, list[Any]] = {"resource": [resource]}
    if operations is not None:
        rules["operation"] = list(operations)
    return DisplayOptions(show=rules)


def operation_property(resource: str, options: list[PropertyOption], default: str) -> NodeProperty:
    return NodeProperty(
        display_name="Operation",
        name="operation",
        type=PropertyType.OPTIONS,
        options=sorted(options, key=lambda o: o.name),
        default=default,
        display_options=show(resource),
    )


def return_all_property(resource: str, operations: Iterable[str]) -> NodeProperty:
    return NodeProperty(
        display_name="Return All",
        name="return_all",
        type=PropertyType.BOOLEAN,
        default=False,
        description="Whether to return all results or only up to a given limit",
        display_options=show(resource, operations),
    )


def limit_property(resource: str, operations: Iterable[str]) -> NodeProperty:
    operations = list(operations)
    return NodeProperty(
        display_name="Limit",
        name="limit",
        type=PropertyType.NUMBER,
        default=50,
        min_value=1,
        max_value=1000,
        description="Max number of results to return",
        display_options=DisplayOptions(
            show={"resource": [resource], "operation": operations, "return_all": [False]},
        ),
    )


def key_value_collection(
    name: str,
    display_name: str,
    resource: str,
    operations: Iterable[str],
    item_display_name: str = "Attribute",
    group: str = "attribute_values",
    key_field: str = "key",
    key_display_name: str = "Key",
) -> NodeProperty:
    """A repeatable key/value fixedCollection (custom attributes, event data...)."""
    return NodeProperty(
        display_name=display_name,
        name=name,
        type=PropertyType.FIXED_COLLECTION,
        default={},
        placeholder=f"Add {item_display_name}",
        multiple_values=True,
        display_options=show(resource, operations),
        groups=[
            PropertyGroup(
                name=group,
                display_name=item_display_name,
                values=[
                    NodeProperty(display_name=key_display_name, name=key_field, type=PropertyType.STRING, default=""),
                    NodeProperty(
                        display_name="Value",
                        name="value",
                        type=PropertyType.STRING,
                        default="",
                        description="The value (supports JSON for complex types)",
                    ),
                ],
            )
        ],
    )


def metric_options_property(resource: str, operations: Iterable[str], with_type: bool = False) -> NodeProperty:
    fields = [
        NodeProperty(
            display_name="Period",
            name="period",
            type=PropertyType.OPTIONS,
            options=[PropertyOption(name=humanize(period), value=period) for period in METRIC_PERIODS],
            default="days",
        ),
        NodeProperty(
            display_name="Steps",
            name="steps",
            type=PropertyType.NUMBER,
            default=7,
            min_value=1,
            max_value=24,
            description="Number of periods to return metrics for",
        ),
    ]
    if with_type:
        fields.append(
            NodeProperty(
                display_name="Type",
                name="type",
                type=PropertyType.OPTIONS,
                options=[PropertyOption(name=humanize(channel), value=channel) for channel in MESSAGE_CHANNELS],
                default="email",
            )
        )
    return NodeProperty(
        display_name="Metric Options",
        name="metric_options",
        type=PropertyType.COLLECTION,
        default={},
        placeholder="Add Option",
        display_options=show(resource, operations),
        children=fields,
    )


_LABEL_WORDS = {"sms": "SMS", "as": "as", "id": "ID", "ids": "IDs"}


def humanize(value: str) -> str:
    """``marked_email_as_spam`` -> ``Marked Email as Spam``."""
    return " ".join(_LABEL_WORDS.get(word, word.capitalize()) for word in value.split("_"))
