"""
HTTP client for the Athleon backend.

Handles:
- Base URL configuration (local vs deployed backend)
- JSON content type headers
- Authorization headers
- Detection of HTML error pages (backend not deployed correctly)
"""
from __future__ import annotations

from typing import Any, Optional

import httpx

from core.exceptions import BackendDeploymentError


class ApiClient:
    def __init__(
        self,
        base_url: str = "",
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        token: Optional[str] = None,
    ) -> httpx.Response:
        """
        Make an API request.

        Raises BackendDeploymentError when a failed response is an HTML page,
        which usually means the request hit a static host instead of the API.
        """
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        response = await self._http.request(method, f"{self.base_url}{endpoint}", json=json, headers=headers)

        content_type = response.headers.get("content-type", "")
        if not response.is_success and "text/html" in content_type:
            raise BackendDeploymentError(
                "Server returned HTML instead of JSON. Backend may not be deployed correctly."
            )
        return response

    async def get(self, endpoint: str, token: Optional[str] = None) -> httpx.Response:
        return await self.request("GET", endpoint, token=token)

    async def post(self, endpoint: str, data: Any = None, token: Optional[str] = None) -> httpx.Response:
        return await self.request("POST", endpoint, json=data, token=token)

    async def put(self, endpoint: str, data: Any = None, token: Optional[str] = None) -> httpx.Response:
        return await self.request("PUT", endpoint, json=data, token=token)

    async def delete(self, endpoint: str, token: Optional[str] = None) -> httpx.Response:
        return await self.request("DELETE", endpoint, token=token)
