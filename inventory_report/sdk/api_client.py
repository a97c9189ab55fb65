"""
HTTP client for the service-management REST API.

Wraps the read endpoints the report and inventory views depend on.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..core.models import ComponentInfo, DateRange, ReportPayload

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080/api"
DEFAULT_TIMEOUT = 30.0


class FetchError(Exception):
    """Raised when a request fails or returns a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def unwrap_paginated(response: Any) -> List[Any]:
    """Return the item list from a ``{data, pagination}`` envelope.

    Plain lists are returned as-is and any other value is wrapped.
    """
    if isinstance(response, dict) and "data" in response and "pagination" in response:
        return response["data"]
    if isinstance(response, list):
        return response
    return [response]


class InventoryApiClient:
    """Async client for the inventory and service endpoints.

    Every failure, HTTP or transport, surfaces as FetchError.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize API client.

        Args:
            base_url: API root, e.g. ``http://localhost:8080/api``
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used to stub the API)

        Raises:
            ValueError: If base_url is empty or timeout is not positive
        """
        if not base_url or not base_url.strip():
            raise ValueError("base_url is required and cannot be empty")
        if timeout <= 0:
            raise ValueError("timeout must be > 0")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "InventoryApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            logger.warning("Request to %s failed: %s", path, exc)
            raise FetchError(f"Request to {path} failed: {exc}") from exc

        if response.is_error:
            message = _error_message(response)
            logger.warning("HTTP %d from %s: %s", response.status_code, path, message)
            raise FetchError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise FetchError(f"Invalid JSON from {path}", status_code=response.status_code) from exc

    async def get_usage_report(self, component_id: int, date_range: DateRange) -> ReportPayload:
        """Fetch the usage report of one part for a date range.

        Raises:
            FetchError: On HTTP/transport failure or a malformed payload
        """
        data = await self._get(
            f"/components/{component_id}/usage-report",
            params=date_range.to_query(),
        )
        try:
            return ReportPayload.from_json(data)
        except (TypeError, ValueError, AttributeError) as exc:
            raise FetchError(f"Malformed usage report for component {component_id}: {exc}") from exc

    async def list_components(self) -> List[ComponentInfo]:
        """Fetch the inventory parts list."""
        data = await self._get("/components")
        try:
            return [ComponentInfo.from_json(item) for item in unwrap_paginated(data)]
        except (TypeError, ValueError, AttributeError) as exc:
            raise FetchError(f"Malformed components list: {exc}") from exc

    async def get_dashboard_stats(self) -> Dict[str, Any]:
        return await self._get("/dashboard/stats")

    async def get_service_records(self, limit: int = 5) -> List[Dict[str, Any]]:
        return unwrap_paginated(await self._get("/service-records", params={"limit": limit}))

    async def get_upcoming_services(self, limit: int = 5) -> List[Dict[str, Any]]:
        return unwrap_paginated(await self._get("/upcoming-services", params={"limit": limit}))


def _error_message(response: httpx.Response) -> str:
    """Prefer the upstream ``message`` field over a generic status text."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"API error: {response.status_code}"
