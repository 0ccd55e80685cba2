"""Tool invocation bridge between tools/call and the tool collaborator."""

import logging
from typing import Any, Protocol

from readwise_mcp.mcp.errors import INTERNAL_ERROR, describe_exception, make_error_data

logger = logging.getLogger(__name__)


class ToolExecutor(Protocol):
    """Anything that can run a named tool."""

    async def execute(self, name: str, arguments: Any) -> Any:
        ...


class ToolBridge:
    """Forward tool calls to the executor and map failures to JSON-RPC errors."""

    def __init__(self, executor: ToolExecutor):
        self.executor = executor

    async def invoke(
        self, name: str, arguments: Any
    ) -> tuple[Any | None, dict[str, Any] | None]:
        """
        Invoke a tool.

        Returns (result, error) tuple. One will be None. The result is
        whatever the executor returned, untouched. Any exception raised by
        the executor becomes an internal error carrying the failure message.
        """
        try:
            result = await self.executor.execute(name, arguments)
        except Exception as e:
            logger.exception(f"Error executing tool {name}")
            return None, make_error_data(INTERNAL_ERROR, data=describe_exception(e))
        return result, None
