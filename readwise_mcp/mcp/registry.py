"""Tool registry: the tool catalog and the execute() collaborator."""

import importlib
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from readwise_mcp.mcp.models import Tool

if TYPE_CHECKING:
    from readwise_mcp.config.loader import Settings

logger = logging.getLogger(__name__)

# Type alias for tool handlers
ToolHandler = Callable[[dict[str, Any]], Awaitable[Any]]


class ToolNotFoundError(LookupError):
    """Raised when execute() is asked for a tool nobody registered."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ToolDefinition:
    """A registered tool with its metadata and handler."""

    def __init__(
        self,
        name: str,
        description: str,
        input_schema: dict[str, Any],
        handler: ToolHandler,
    ):
        self.name = name
        self.description = description
        self.input_schema = input_schema
        self.handler = handler

    def to_mcp_tool(self) -> Tool:
        """Convert to MCP Tool model for protocol responses."""
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema,
        )


class ToolRegistry:
    """Registry for MCP tools with plugin-style provider loading."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        self._providers: set[str] = set()

    def register(
        self,
        name: str,
        description: str,
        input_schema: dict[str, Any],
        handler: ToolHandler,
    ) -> None:
        """Register a tool with the registry."""
        if name in self._tools:
            logger.warning(f"Tool '{name}' already registered, overwriting")
        self._tools[name] = ToolDefinition(
            name=name,
            description=description,
            input_schema=input_schema,
            handler=handler,
        )
        logger.info(f"Registered tool: {name}")

    def get(self, name: str) -> ToolDefinition | None:
        """Get a tool by name."""
        return self._tools.get(name)

    def list_tools(self) -> list[Tool]:
        """List all registered tools as MCP Tool models."""
        return [tool.to_mcp_tool() for tool in self._tools.values()]

    async def execute(self, name: str, arguments: Any) -> Any:
        """
        Run a tool by name.

        Failures propagate to the caller; the invocation bridge owns the
        mapping to protocol errors.
        """
        tool = self.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        return await tool.handler(arguments if isinstance(arguments, dict) else {})

    def load_provider(
        self,
        provider_name: str,
        settings: "Settings",
        provider_config: dict[str, Any] | None = None,
    ) -> bool:
        """
        Load a provider module and register its tools.

        Providers live in readwise_mcp/tools/<provider_name>/ and expose a
        register_tools(registry, settings, provider_config) function.
        """
        if provider_name in self._providers:
            logger.debug(f"Provider '{provider_name}' already loaded")
            return True

        module_path = f"readwise_mcp.tools.{provider_name}.tools"
        try:
            module = importlib.import_module(module_path)
        except ImportError as e:
            logger.warning(f"Could not import provider '{provider_name}': {e}")
            return False

        if not hasattr(module, "register_tools"):
            logger.warning(f"Provider '{provider_name}' has no register_tools function")
            return False

        module.register_tools(self, settings, provider_config or {})
        self._providers.add(provider_name)
        logger.info(f"Loaded provider: {provider_name}")
        return True

    @property
    def tool_count(self) -> int:
        """Return the number of registered tools."""
        return len(self._tools)

    @property
    def provider_count(self) -> int:
        """Return the number of loaded providers."""
        return len(self._providers)
