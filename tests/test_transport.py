"""Test the Customer.io HTTP transport and cursor pagination."""
import base64
import json

import httpx
import pytest

from customerio.config import ClientConfig
from customerio.credentials import CustomerIoCredentials
from customerio.errors import CustomerIoApiError
from customerio.transport import ApiType, CustomerIoClient, get_auth_header, get_base_url

CREDS = CustomerIoCredentials(site_id="site", track_api_key="track-key", app_api_key="app-key")


def make_client(handler, credentials=CREDS, config=None):
    return CustomerIoClient(credentials, config=config, transport=httpx.MockTransport(handler))


def test_base_urls_per_region():
    assert get_base_url(ApiType.TRACK, "us") == "https://track.customer.io/api/v1"
    assert get_base_url(ApiType.TRACK, "eu") == "https://track-eu.customer.io/api/v1"
    assert get_base_url(ApiType.APP, "eu") == "https://api-eu.customer.io/v1"
    assert get_base_url(ApiType.PIPELINES, "eu") == "https://cdp.customer.io/v1"
    assert get_base_url(ApiType.BETA, "us") == "https://beta-api.customer.io/v1/api"


def test_auth_headers():
    expected_basic = "Basic " + base64.b64encode(b"site:track-key").decode()
    assert get_auth_header(ApiType.TRACK, CREDS) == expected_basic
    assert get_auth_header(ApiType.PIPELINES, CREDS) == expected_basic
    assert get_auth_header(ApiType.APP, CREDS) == "Bearer app-key"
    assert get_auth_header(ApiType.BETA, CREDS) == "Bearer app-key"


@pytest.mark.asyncio
async def test_request_sends_json_and_query():
    seen = {}

    def handler(request):
        seen["request"] = request
        return httpx.Response(200, json={"ok": True})

    async with make_client(handler) as client:
        result = await client.request(
            "POST", "/customers", {"email": "a@b.io"}, query={"limit": 5, "skip": None}, api_type=ApiType.APP,
        )

    request = seen["request"]
    assert result == {"ok": True}
    assert request.url.host == "api.customer.io"
    assert request.url.path == "/v1/customers"
    assert dict(request.url.params) == {"limit": "5"}
    assert request.headers["Authorization"] == "Bearer app-key"
    assert request.headers["Content-Type"] == "application/json"
    assert json.loads(request.content) == {"email": "a@b.io"}


@pytest.mark.asyncio
async def test_request_without_body_sends_nothing():
    seen = {}

    def handler(request):
        seen["content"] = request.content
        return httpx.Response(200)

    async with make_client(handler) as client:
        result = await client.request("DELETE", "/customers/42")

    assert seen["content"] == b""
    assert result == {}


@pytest.mark.asyncio
async def test_request_non_json_body_wrapped():
    async with make_client(lambda request: httpx.Response(200, text="OK")) as client:
        assert await client.request("GET", "/anything") == {"data": "OK"}


@pytest.mark.asyncio
async def test_request_error_status_raises_api_error():
    def handler(request):
        return httpx.Response(404, json={"meta": {"error": "Customer not found"}})

    async with make_client(handler) as client:
        with pytest.raises(CustomerIoApiError) as excinfo:
            await client.request("GET", "/customers/missing", api_type=ApiType.APP)

    err = excinfo.value
    assert err.status_code == 404
    assert err.payload == {"meta": {"error": "Customer not found"}}
    assert str(err) == "Customer.io API error: HTTP 404: Customer not found"


@pytest.mark.asyncio
async def test_request_error_uses_errors_list_detail():
    def handler(request):
        return httpx.Response(400, json={"errors": [{"detail": "bad filter"}]})

    async with make_client(handler) as client:
        with pytest.raises(CustomerIoApiError, match="bad filter"):
            await client.request("POST", "/customers", {"filter": {}}, api_type=ApiType.BETA)


@pytest.mark.asyncio
async def test_request_transport_failure_raises_api_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with make_client(handler) as client:
        with pytest.raises(CustomerIoApiError) as excinfo:
            await client.request("GET", "/segments", api_type=ApiType.APP)

    assert excinfo.value.status_code is None
    assert "connection refused" in str(excinfo.value)


@pytest.mark.asyncio
async def test_request_all_items_follows_next_cursor():
    pages = {
        "": {"customers": [{"id": 1}, {"id": 2}], "next": "cursor-2"},
        "cursor-2": {"customers": [{"id": 3}], "next": "cursor-3"},
        "cursor-3": {"customers": [], "next": ""},
    }
    starts = []

    def handler(request):
        starts.append(request.url.params["start"])
        assert request.url.params["limit"] == "100"
        return httpx.Response(200, json=pages[request.url.params["start"]])

    async with make_client(handler) as client:
        items = await client.request_all_items("GET", "/customers", property_name="customers")

    assert items == [{"id": 1}, {"id": 2}, {"id": 3}]
    assert starts == ["", "cursor-2", "cursor-3"]


@pytest.mark.asyncio
async def test_request_all_items_respects_page_size_and_query():
    seen = []

    def handler(request):
        seen.append(dict(request.url.params))
        return httpx.Response(200, json={"activities": [{"id": "a"}]})

    async with make_client(handler, config=ClientConfig(page_size=25)) as client:
        items = await client.request_all_items(
            "GET", "/activities", query={"type": "event"}, property_name="activities",
        )

    assert items == [{"id": "a"}]
    assert seen == [{"type": "event", "limit": "25", "start": ""}]


@pytest.mark.asyncio
async def test_request_all_items_posts_body_each_page():
    bodies = []

    def handler(request):
        bodies.append(json.loads(request.content))
        if len(bodies) == 1:
            return httpx.Response(200, json={"identifiers": [{"id": "1"}], "next": "n"})
        return httpx.Response(200, json={"identifiers": [{"id": "2"}]})

    async with make_client(handler) as client:
        items = await client.request_all_items(
            "POST", "/customers", {"filter": {"and": []}}, api_type=ApiType.BETA, property_name="identifiers",
        )

    assert items == [{"id": "1"}, {"id": "2"}]
    assert bodies == [{"filter": {"and": []}}, {"filter": {"and": []}}]


@pytest.mark.asyncio
async def test_test_credentials_hits_track_auth():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, json={"meta": {}})

    eu = CustomerIoCredentials(site_id="site", track_api_key="track-key", app_api_key="app-key", region="eu")
    async with make_client(handler, credentials=eu) as client:
        assert await client.test_credentials() is True

    assert seen["url"] == "https://track-eu.customer.io/auth"
    assert seen["auth"].startswith("Basic ")


@pytest.mark.asyncio
async def test_test_credentials_rejected():
    async with make_client(lambda request: httpx.Response(401)) as client:
        assert await client.test_credentials() is False


@pytest.mark.asyncio
async def test_aclose_resets_client():
    client = make_client(lambda request: httpx.Response(200))
    first = client.http
    await client.aclose()
    assert client._client is None
    assert client.http is not first
    await client.aclose()
