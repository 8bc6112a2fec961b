"""Resource registry: one module per Customer.io resource."""
from __future__ import annotations
from typing import Optional

from customerio.resources import (
    activities,
    broadcasts,
    campaigns,
    customers,
    events,
    exports,
    messages,
    newsletters,
    objects,
    people,
    pipelines,
    segments,
    transactional,
)
from customerio.resources.base import Resource

# Selector order
RESOURCES: dict[str, Resource] = {
    module.resource.name: module.resource
    for module in (
        activities,
        broadcasts,
        campaigns,
        customers,
        events,
        exports,
        messages,
        newsletters,
        objects,
        people,
        pipelines,
        segments,
        transactional,
    )
}


def get_resource(name: str) -> Optional[Resource]:
    return RESOURCES.get(name)


__all__ = ["RESOURCES", "Resource", "get_resource"]
