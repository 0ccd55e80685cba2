"""Readwise MCP server: JSON-RPC 2.0 tools over HTTP with an SSE channel."""

__version__ = "1.0.0"
