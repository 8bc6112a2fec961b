"""Customer.io HTTP transport.

A single request helper shared by every resource:
- Base URL and auth selected per API family (Track/App/Pipelines/Beta)
- JSON in, JSON out (empty Track API responses become ``{}``)
- HTTP and network failures raised as ``CustomerIoApiError``
- Cursor pagination over the ``next`` token for list endpoints
"""
from __future__ import annotations
from enum import Enum
from typing import Any, Optional
import logging

import httpx

from customerio.config import ClientConfig
from customerio.constants import (
    APP_API_ENDPOINTS,
    BETA_API_ENDPOINTS,
    PIPELINES_API_ENDPOINT,
    TRACK_API_ENDPOINTS,
)
from customerio.credentials import CustomerIoCredentials, credential_test_request
from customerio.errors import CustomerIoApiError

logger = logging.getLogger(__name__)


class ApiType(str, Enum):
    TRACK = "track"
    APP = "app"
    PIPELINES = "pipelines"
    BETA = "beta"


def get_base_url(api_type: ApiType, region: str) -> str:
    if api_type == ApiType.APP:
        return APP_API_ENDPOINTS[region]
    if api_type == ApiType.PIPELINES:
        return PIPELINES_API_ENDPOINT
    if api_type == ApiType.BETA:
        return BETA_API_ENDPOINTS[region]
    return TRACK_API_ENDPOINTS[region]


def get_auth_header(api_type: ApiType, credentials: CustomerIoCredentials) -> str:
    """App and Beta use the Bearer App key; Track and Pipelines use Basic auth."""
    if api_type in (ApiType.APP, ApiType.BETA):
        return credentials.bearer_auth
    return credentials.basic_auth


def _error_message(resp: httpx.Response, payload: Any) -> str:
    if isinstance(payload, dict):
        meta = payload.get("meta")
        if isinstance(meta, dict) and meta.get("error"):
            return f"HTTP {resp.status_code}: {meta['error']}"
        errors = payload.get("errors")
        if isinstance(errors, list) and errors:
            first = errors[0]
            detail = first.get("detail") or first.get("message") if isinstance(first, dict) else first
            return f"HTTP {resp.status_code}: {detail}"
        if payload.get("message"):
            return f"HTTP {resp.status_code}: {payload['message']}"
    return f"HTTP {resp.status_code}: {resp.reason_phrase or resp.text[:200]}"


def _decode(resp: httpx.Response) -> Any:
    if not resp.content:
        return {}
    try:
        return resp.json()
    except ValueError:
        return {"data": resp.text}


class CustomerIoClient:
    """Async client for every Customer.io API family.

    Usage::

        async with CustomerIoClient(credentials) as client:
            segments = await client.request("GET", "/segments", api_type=ApiType.APP)
    """

    def __init__(
        self,
        credentials: CustomerIoCredentials,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.credentials = credentials
        self.config = config or ClientConfig.default()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "CustomerIoClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @property
    def http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout,
                headers={"User-Agent": self.config.user_agent},
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # --- Core request ---

    async def request(
        self,
        method: str,
        endpoint: str,
        body: Optional[dict[str, Any]] = None,
        query: Optional[dict[str, Any]] = None,
        api_type: ApiType = ApiType.TRACK,
    ) -> Any:
        """Call one endpoint and return the decoded JSON body."""
        url = f"{get_base_url(api_type, self.credentials.region)}{endpoint}"
        headers = {
            "Authorization": get_auth_header(api_type, self.credentials),
            "Content-Type": "application/json",
        }
        params = {key: value for key, value in (query or {}).items() if value is not None}

        logger.debug("Customer.io %s %s %s", method, api_type.value, endpoint)
        try:
            resp = await self.http.request(
                method,
                url,
                params=params or None,
                json=body or None,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            logger.warning("Customer.io %s %s failed: %s", method, endpoint, exc)
            raise CustomerIoApiError(str(exc) or exc.__class__.__name__) from exc

        if resp.status_code >= 400:
            payload = _decode(resp)
            logger.warning("Customer.io %s %s returned HTTP %s", method, endpoint, resp.status_code)
            raise CustomerIoApiError(_error_message(resp, payload), status_code=resp.status_code, payload=payload)

        return _decode(resp)

    async def request_all_items(
        self,
        method: str,
        endpoint: str,
        body: Optional[dict[str, Any]] = None,
        query: Optional[dict[str, Any]] = None,
        api_type: ApiType = ApiType.APP,
        property_name: str = "results",
    ) -> list[Any]:
        """Follow the ``next`` cursor until the API stops returning one."""
        query = dict(query or {})
        query["limit"] = query.get("limit") or self.config.page_size
        query["start"] = query.get("start") or ""

        results: list[Any] = []
        pages = 0
        while True:
            response = await self.request(method, endpoint, body, query, api_type)
            pages += 1
            items = response.get(property_name) if isinstance(response, dict) else None
            if items:
                results.extend(items)

            next_cursor = response.get("next") if isinstance(response, dict) else None
            if not next_cursor:
                break
            query["start"] = next_cursor

        logger.debug("Customer.io %s fetched %d item(s) over %d page(s)", endpoint, len(results), pages)
        return results

    async def test_credentials(self) -> bool:
        """Check the credential set against the Track API ``/auth`` endpoint."""
        spec = credential_test_request(self.credentials)
        try:
            resp = await self.http.request(spec["method"], spec["url"], headers=spec["headers"])
        except httpx.HTTPError as exc:
            logger.warning("Customer.io credential test failed: %s", exc)
            return False
        return resp.is_success
