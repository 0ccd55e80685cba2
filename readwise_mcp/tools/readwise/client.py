"""Readwise and Reader API client."""

import logging
from typing import Any

import httpx

from readwise_mcp.utils.http import create_http_client, http_retry

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://readwise.io"


class ReadwiseClient:
    """Client for the Readwise v2 API and the Reader v3 API."""

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return create_http_client(
            timeout=self.timeout,
            base_url=self.base_url,
            headers={"Authorization": f"Token {self._token}"},
            user_agent=self.user_agent,
            transport=self._transport,
        )

    @http_retry
    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        async with self._client() as client:
            response = await client.get(path, params=params)
            response.raise_for_status()
            if response.status_code == 204 or not response.content:
                return None
            return response.json()

    async def list_books(self, **params: Any) -> dict[str, Any]:
        """
        List books (sources) with highlights.

        Accepts the Readwise query parameters as keyword arguments, e.g.
        page_size, page, category, source, updated__gt.
        """
        return await self._get("/api/v2/books/", params=params or None)

    async def list_highlights(self, **params: Any) -> dict[str, Any]:
        """List highlights, optionally filtered by book_id or update time."""
        return await self._get("/api/v2/highlights/", params=params or None)

    async def daily_review(self) -> dict[str, Any]:
        """Get today's daily review highlights."""
        return await self._get("/api/v2/review/")

    async def list_documents(self, **params: Any) -> dict[str, Any]:
        """List Reader documents (location, category, updatedAfter, pageCursor)."""
        return await self._get("/api/v3/list/", params=params or None)
