"""
HTTP client for the dispatch dashboard REST API.
Backs the query cache, the route screen negotiation actions and the API health badge.
"""

from typing import Any, Dict, Optional

import httpx
import structlog

from ..config import settings

logger = structlog.get_logger(__name__)


class DashboardApiError(Exception):
    """Raised when a dashboard API request fails."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, detail: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail if detail is not None else message


class DashboardApiClient:
    """Thin async wrapper over the dashboard REST endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or settings.api.base_url).rstrip("/")
        self.timeout = timeout or settings.api.timeout
        self.client = client or httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self.client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = _error_detail(e.response)
            logger.error(
                "Dashboard API returned an error",
                method=method,
                path=path,
                status=e.response.status_code,
                detail=detail,
            )
            raise DashboardApiError(
                f"{method} {path} failed: {detail}",
                status_code=e.response.status_code,
                detail=detail,
            ) from e
        except httpx.HTTPError as e:
            logger.error("HTTP error in dashboard request", method=method, path=path, error=str(e))
            raise DashboardApiError(f"Connection error: {e}") from e

        if not response.content:
            return None
        return response.json()

    async def fetch(self, key: str) -> Any:
        """Fetch a collection by its cache key (the key is the API path)."""
        return await self._request("GET", key)

    async def negotiate_rate(self, load_id: int) -> Dict[str, Any]:
        return await self._request("POST", "/api/negotiate-rate", json={"loadId": load_id})

    async def update_negotiation(
        self, negotiation_id: int, *, status: str, final_rate: Optional[str] = None
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"status": status}
        if final_rate is not None:
            payload["finalRate"] = final_rate
        return await self._request("PATCH", f"/api/negotiations/{negotiation_id}", json=payload)

    async def system_status(self) -> Dict[str, Any]:
        return await self._request("GET", "/api/system-status")

    async def health_check(self) -> bool:
        try:
            await self.system_status()
            return True
        except DashboardApiError as e:
            logger.warning("Dashboard health check failed", error=str(e))
            return False

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and "error" in body:
        return str(body["error"])
    return str(body)
