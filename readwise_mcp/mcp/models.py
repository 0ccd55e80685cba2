"""Pydantic models for MCP JSON-RPC 2.0 protocol."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# JSON-RPC 2.0 Base Models
# =============================================================================


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request object.

    Only the version marker is checked here; an unknown or missing method is
    the router's concern, not the envelope's.
    """

    model_config = ConfigDict(strict=True)

    jsonrpc: Literal["2.0"]
    id: Any = None
    method: Any = None
    params: Any = None


class JsonRpcError(BaseModel):
    """JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """JSON-RPC 2.0 response object."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: Any = None
    result: Any = None
    error: JsonRpcError | None = None

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        """Serialize with exactly one of result/error present.

        The result is returned as the same object the handler produced.
        """
        data: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            data["error"] = self.error.model_dump(exclude_none=True)
        else:
            data["result"] = self.result
        return data


# =============================================================================
# MCP Content Types
# =============================================================================


class TextContent(BaseModel):
    """Text content returned by tools."""

    type: Literal["text"] = "text"
    text: str


# =============================================================================
# MCP Tool Models
# =============================================================================


class Tool(BaseModel):
    """MCP tool definition."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Tool name (lowercase with underscores)")
    description: str = Field(..., description="Human-readable description")
    inputSchema: dict[str, Any] = Field(
        ..., description="JSON Schema for tool input"
    )


class ToolCallResult(BaseModel):
    """Result of a tool call."""

    content: list[TextContent]
    isError: bool = False


# =============================================================================
# MCP Protocol Models
# =============================================================================


class McpMethod(str, Enum):
    """The closed set of methods the router answers."""

    INITIALIZE = "initialize"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"


class ServerInfo(BaseModel):
    """Server information returned during initialization."""

    name: str
    version: str


class Capabilities(BaseModel):
    """Server capabilities."""

    tools: dict[str, Any] = Field(default_factory=dict)


class InitializeResult(BaseModel):
    """Result of initialize request."""

    protocolVersion: str
    capabilities: Capabilities
    serverInfo: ServerInfo


class ToolsListResult(BaseModel):
    """Result of tools/list request."""

    tools: list[Tool]
