"""Test the Customer.io action node: description and per-item dispatch."""
import json
from datetime import datetime, timezone

import httpx
import pytest

from customerio.context import ExecutionContext
from customerio.credentials import CustomerIoCredentials
from customerio.errors import CustomerIoApiError, NodeOperationError
from customerio.node import CustomerIoNode
from customerio.resources import RESOURCES
from customerio.transport import CustomerIoClient

CREDS = CustomerIoCredentials(site_id="site", track_api_key="track-key", app_api_key="app-key")


def make_client(handler):
    return CustomerIoClient(CREDS, transport=httpx.MockTransport(handler))


def test_resource_selector():
    node = CustomerIoNode()
    selector = node.description.properties[0]
    assert selector.name == "resource"
    assert selector.default == "people"
    assert len(selector.options) == 13
    assert set(selector.option_values()) == set(RESOURCES)


def test_every_operation_has_a_handler():
    for name, resource in RESOURCES.items():
        operation = resource.operations[0]
        assert set(operation.option_values()) == set(resource.handlers), name


def test_operation_options_sorted_by_name():
    for resource in RESOURCES.values():
        names = [option.name for option in resource.operations[0].options]
        assert names == sorted(names)


def test_visible_properties_follow_selection():
    node = CustomerIoNode()
    params = {"resource": "broadcasts", "operation": "trigger_broadcast", "recipient_type": "ids", "return_all": False}
    visible = {prop.name for prop in node.description.visible_properties(params)}
    assert {"broadcast_id", "recipient_type", "customer_ids", "trigger_options"} <= visible
    assert "emails" not in visible
    assert "per_user_data" not in visible


def test_limit_hidden_when_returning_all():
    node = CustomerIoNode()
    params = {"resource": "exports", "operation": "list_exports", "return_all": True}
    assert node.description.get_property("limit", params) is None
    params["return_all"] = False
    assert node.description.get_property("limit", params).default == 50


@pytest.mark.asyncio
async def test_execute_pairs_items_with_inputs():
    def handler(request):
        segment_id = request.url.path.rsplit("/", 1)[-1]
        return httpx.Response(200, json={"segment": {"id": int(segment_id)}})

    ctx = ExecutionContext(
        credentials=CREDS,
        items=[{}, {}],
        parameters=[
            {"resource": "segments", "operation": "get_segment", "segment_id": 1},
            {"resource": "segments", "operation": "get_segment", "segment_id": 2},
        ],
    )
    async with make_client(handler) as client:
        results = await CustomerIoNode().execute(ctx, client)

    assert [r.paired_item for r in results] == [0, 1]
    assert [r.data for r in results] == [{"segment": {"id": 1}}, {"segment": {"id": 2}}]
    assert results[1].to_dict() == {"json": {"segment": {"id": 2}}, "paired_item": {"item": 1}}


@pytest.mark.asyncio
async def test_execute_splits_list_responses():
    def handler(request):
        return httpx.Response(200, json={"messages": [{"id": "a"}, {"id": "b"}]})

    ctx = ExecutionContext(
        credentials=CREDS,
        parameters={"resource": "messages", "operation": "list_messages", "return_all": True},
    )
    async with make_client(handler) as client:
        results = await CustomerIoNode().execute(ctx, client)

    assert [r.data for r in results] == [{"id": "a"}, {"id": "b"}]


@pytest.mark.asyncio
async def test_continue_on_fail_reports_error_and_continues():
    def handler(request):
        if request.url.path.endswith("/missing"):
            return httpx.Response(404, json={"meta": {"error": "not found"}})
        return httpx.Response(200, json={"customer": {"id": "42"}})

    ctx = ExecutionContext(
        credentials=CREDS,
        items=[{}, {}],
        continue_on_fail=True,
        parameters=[
            {"resource": "customers", "operation": "get_customer", "customer_id": "missing"},
            {"resource": "customers", "operation": "get_customer", "customer_id": "42"},
        ],
    )
    async with make_client(handler) as client:
        results = await CustomerIoNode().execute(ctx, client)

    assert results[0].data == {"error": "Customer.io API error: HTTP 404: not found"}
    assert results[0].paired_item == 0
    assert results[1].data == {"customer": {"id": "42"}}


@pytest.mark.asyncio
async def test_errors_propagate_without_continue_on_fail():
    ctx = ExecutionContext(
        credentials=CREDS,
        parameters={"resource": "customers", "operation": "get_customer", "customer_id": "42"},
    )
    async with make_client(lambda request: httpx.Response(500)) as client:
        with pytest.raises(CustomerIoApiError) as excinfo:
            await CustomerIoNode().execute(ctx, client)
    assert excinfo.value.status_code == 500


@pytest.mark.asyncio
async def test_unknown_resource():
    ctx = ExecutionContext(credentials=CREDS, parameters={"resource": "coupons", "operation": "list"})
    with pytest.raises(NodeOperationError, match="Unknown resource: coupons"):
        await CustomerIoNode().execute(ctx)


@pytest.mark.asyncio
async def test_unknown_resource_with_continue_on_fail_yields_error_per_item():
    ctx = ExecutionContext(
        credentials=CREDS,
        items=[{}, {}],
        continue_on_fail=True,
        parameters={"resource": "coupons", "operation": "list"},
    )
    async with make_client(lambda request: httpx.Response(200)) as client:
        results = await CustomerIoNode().execute(ctx, client)

    assert [r.data for r in results] == [{"error": "Unknown resource: coupons"}] * 2
    assert [r.paired_item for r in results] == [0, 1]


@pytest.mark.asyncio
async def test_continue_on_fail_catches_non_object_search_query():
    ctx = ExecutionContext(
        credentials=CREDS,
        items=[{}, {}],
        continue_on_fail=True,
        parameters=[
            {"resource": "customers", "operation": "search_customers", "search_query": "[1]"},
            {"resource": "customers", "operation": "search_customers", "search_query": '{"filter": {}}'},
        ],
    )
    async with make_client(lambda request: httpx.Response(200, json={"identifiers": []})) as client:
        results = await CustomerIoNode().execute(ctx, client)

    assert results[0].data == {"error": "Invalid JSON in search query"}
    assert results[1].data == {"identifiers": []}


@pytest.mark.asyncio
async def test_pipelines_datetime_timestamp_is_sent_as_iso():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200)

    ctx = ExecutionContext(
        credentials=CREDS,
        continue_on_fail=True,
        parameters={"resource": "pipelines", "operation": "cdp_track", "user_id": "42", "event_name": "Signed Up",
                    "options": {"timestamp": datetime(2024, 1, 1, tzinfo=timezone.utc)}},
    )
    async with make_client(handler) as client:
        results = await CustomerIoNode().execute(ctx, client)

    assert [r.data for r in results] == [{"success": True}]
    assert json.loads(requests[0].content)["timestamp"] == "2024-01-01T00:00:00.000Z"
