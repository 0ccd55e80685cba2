"""MCP method handlers for JSON-RPC requests."""

import logging
from typing import Any

from readwise_mcp.config.loader import ServerConfig
from readwise_mcp.mcp.bridge import ToolBridge
from readwise_mcp.mcp.errors import METHOD_NOT_FOUND, INVALID_PARAMS, make_error_data
from readwise_mcp.mcp.models import (
    Capabilities,
    InitializeResult,
    McpMethod,
    ServerInfo,
    ToolsListResult,
)

logger = logging.getLogger(__name__)

HandlerOutcome = tuple[Any | None, dict[str, Any] | None]


class MCPHandlers:
    """Handlers for MCP protocol methods."""

    def __init__(self, config: ServerConfig, bridge: ToolBridge):
        self.config = config
        self.bridge = bridge

    async def handle_initialize(self, params: Any) -> HandlerOutcome:
        """Handle the initialize request. Client params are not inspected."""
        result = InitializeResult(
            protocolVersion=self.config.protocol_version,
            capabilities=Capabilities(tools={}),
            serverInfo=ServerInfo(
                name=self.config.server_name,
                version=self.config.server_version,
            ),
        )
        return result.model_dump(), None

    async def handle_tools_list(self, params: Any) -> HandlerOutcome:
        """Handle the tools/list request."""
        result = ToolsListResult(tools=list(self.config.tools))
        return result.model_dump(), None

    async def handle_tools_call(self, params: Any) -> HandlerOutcome:
        """Handle the tools/call request."""
        if not isinstance(params, dict):
            params = {}

        name = params.get("name")
        if not isinstance(name, str) or not name:
            logger.info("tools/call without a tool name")
            return None, make_error_data(
                INVALID_PARAMS, "Invalid params: tool name is required"
            )

        arguments = params.get("arguments") or {}
        logger.info(f"Calling tool: {name}")
        return await self.bridge.invoke(name, arguments)

    async def dispatch(self, method: Any, params: Any) -> HandlerOutcome:
        """
        Dispatch a method call to the appropriate handler.

        Returns (result, error) tuple. One will be None.
        """
        try:
            kind = McpMethod(method)
        except ValueError:
            return None, make_error_data(METHOD_NOT_FOUND)

        handlers = {
            McpMethod.INITIALIZE: self.handle_initialize,
            McpMethod.TOOLS_LIST: self.handle_tools_list,
            McpMethod.TOOLS_CALL: self.handle_tools_call,
        }
        return await handlers[kind](params)
