"""Readwise provider tools."""

import json
import logging
from typing import TYPE_CHECKING, Any

from readwise_mcp.mcp.models import TextContent, ToolCallResult
from readwise_mcp.mcp.registry import ToolRegistry
from readwise_mcp.tools.readwise.client import DEFAULT_BASE_URL, ReadwiseClient

if TYPE_CHECKING:
    from readwise_mcp.config.loader import Settings

logger = logging.getLogger(__name__)

BOOK_CATEGORIES = ["books", "articles", "tweets", "supplementals", "podcasts"]
READER_LOCATIONS = ["new", "later", "shortlist", "archive", "feed"]
READER_CATEGORIES = [
    "article", "email", "rss", "highlight", "note", "pdf", "epub", "tweet", "video",
]


def _pick(arguments: dict[str, Any], *keys: str) -> dict[str, Any]:
    """Copy the given keys from arguments, skipping missing and null values."""
    return {key: arguments[key] for key in keys if arguments.get(key) is not None}


def _as_result(data: Any) -> dict[str, Any]:
    return ToolCallResult(
        content=[TextContent(text=json.dumps(data, indent=2, ensure_ascii=False))],
    ).model_dump()


class ReadwiseHandlers:
    """Tool handlers bound to one Readwise client."""

    def __init__(self, client: ReadwiseClient):
        self.client = client

    async def list_books(self, arguments: dict[str, Any]) -> dict[str, Any]:
        params = _pick(arguments, "page_size", "page", "category", "source", "updated__gt", "updated__lt")
        return _as_result(await self.client.list_books(**params))

    async def list_highlights(self, arguments: dict[str, Any]) -> dict[str, Any]:
        params = _pick(arguments, "page_size", "page", "book_id", "updated__gt", "updated__lt")
        return _as_result(await self.client.list_highlights(**params))

    async def daily_review(self, arguments: dict[str, Any]) -> dict[str, Any]:
        return _as_result(await self.client.daily_review())

    async def list_documents(self, arguments: dict[str, Any]) -> dict[str, Any]:
        params = _pick(arguments, "id", "location", "category", "updatedAfter", "pageCursor")
        return _as_result(await self.client.list_documents(**params))


def register_tools(
    registry: ToolRegistry,
    settings: "Settings",
    provider_config: dict[str, Any] | None = None,
) -> None:
    """Register all Readwise tools with the registry."""
    provider_config = provider_config or {}
    client = ReadwiseClient(
        settings.readwise_token,
        base_url=provider_config.get("base_url", DEFAULT_BASE_URL),
        timeout=float(provider_config.get("timeout", settings.default_timeout)),
        user_agent=f"{settings.server_name}/{settings.server_version}",
    )
    handlers = ReadwiseHandlers(client)

    registry.register(
        name="readwise_list_books",
        description="List books, articles and other sources that have highlights in Readwise.",
        input_schema={
            "type": "object",
            "properties": {
                "page_size": {
                    "type": "integer",
                    "description": "Number of results per page (max 1000)",
                    "minimum": 1,
                    "maximum": 1000,
                },
                "page": {"type": "integer", "description": "Page number", "minimum": 1},
                "category": {"type": "string", "enum": BOOK_CATEGORIES},
                "source": {"type": "string", "description": "Source filter, e.g. kindle"},
                "updated__gt": {"type": "string", "description": "ISO 8601 lower bound on last update"},
                "updated__lt": {"type": "string", "description": "ISO 8601 upper bound on last update"},
            },
            "required": [],
        },
        handler=handlers.list_books,
    )

    registry.register(
        name="readwise_list_highlights",
        description="List Readwise highlights, optionally for a single book.",
        input_schema={
            "type": "object",
            "properties": {
                "page_size": {
                    "type": "integer",
                    "description": "Number of results per page (max 1000)",
                    "minimum": 1,
                    "maximum": 1000,
                },
                "page": {"type": "integer", "description": "Page number", "minimum": 1},
                "book_id": {"type": "integer", "description": "Only highlights from this book"},
                "updated__gt": {"type": "string", "description": "ISO 8601 lower bound on last update"},
                "updated__lt": {"type": "string", "description": "ISO 8601 upper bound on last update"},
            },
            "required": [],
        },
        handler=handlers.list_highlights,
    )

    registry.register(
        name="readwise_daily_review",
        description="Get today's Readwise daily review highlights.",
        input_schema={"type": "object", "properties": {}, "required": []},
        handler=handlers.daily_review,
    )

    registry.register(
        name="readwise_list_documents",
        description="List documents saved in Readwise Reader.",
        input_schema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Return only this document"},
                "location": {"type": "string", "enum": READER_LOCATIONS},
                "category": {"type": "string", "enum": READER_CATEGORIES},
                "updatedAfter": {"type": "string", "description": "ISO 8601 lower bound on last update"},
                "pageCursor": {"type": "string", "description": "Cursor from a previous response's nextPageCursor"},
            },
            "required": [],
        },
        handler=handlers.list_documents,
    )
