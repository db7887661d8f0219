"""Async client for the outage board API.

Thin fetch wrapper used by front ends and scripts. Server error messages are
passed through verbatim; nothing is retried.
"""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000/api"


class OutageBoardClientError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class OutageBoardClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 15,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"), timeout=timeout, transport=transport,
        )

    async def __aenter__(self) -> "OutageBoardClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def report_outage(self, service: str, area: str) -> dict[str, Any]:
        resp = await self._client.post("/outages", json={"service": service, "area": area})
        return self._unwrap(resp, "Failed to report outage")

    async def get_outages(self, status: str | None = None) -> list[dict[str, Any]]:
        params = {"status": status} if status else None
        resp = await self._client.get("/outages", params=params)
        return self._unwrap(resp, "Failed to fetch outages")

    async def restore_outage(self, outage_id: str) -> dict[str, Any]:
        resp = await self._client.put(f"/outages/{outage_id}/restore")
        return self._unwrap(resp, "Failed to restore service")

    async def get_stats(self) -> dict[str, Any]:
        resp = await self._client.get("/outages/stats")
        return self._unwrap(resp, "Failed to fetch stats")

    async def get_insights(self) -> dict[str, Any]:
        resp = await self._client.get("/outages/insights")
        return self._unwrap(resp, "Failed to fetch insights")

    async def get_impact(self) -> dict[str, Any]:
        resp = await self._client.get("/outages/impact")
        return self._unwrap(resp, "Failed to fetch impact")

    async def delete_outage(self, outage_id: str, admin_password: str) -> dict[str, Any]:
        resp = await self._client.delete(
            f"/outages/{outage_id}", headers={"x-admin-password": admin_password},
        )
        return self._unwrap(resp, "Failed to delete outage")

    @staticmethod
    def _unwrap(resp: httpx.Response, default_message: str):
        if resp.is_success:
            return resp.json()
        message = default_message
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            message = body["error"]
        logger.warning("%s %s failed (%d): %s", resp.request.method, resp.request.url, resp.status_code, message)
        raise OutageBoardClientError(message, status_code=resp.status_code)
