"""MCP (Model Context Protocol) implementation with JSON-RPC 2.0."""

from readwise_mcp.mcp.models import (
    JsonRpcRequest,
    JsonRpcResponse,
    JsonRpcError,
    McpMethod,
    Tool,
    TextContent,
    ToolCallResult,
)
from readwise_mcp.mcp.registry import ToolNotFoundError, ToolRegistry
from readwise_mcp.mcp.errors import (
    PARSE_ERROR,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    INVALID_PARAMS,
    INTERNAL_ERROR,
    UNAUTHORIZED,
    FORBIDDEN,
)

__all__ = [
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonRpcError",
    "McpMethod",
    "Tool",
    "TextContent",
    "ToolCallResult",
    "ToolNotFoundError",
    "ToolRegistry",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "UNAUTHORIZED",
    "FORBIDDEN",
]
