"""Tool registry for managing and dispatching tools."""

import logging
from typing import Any

from .base import Tool, ToolContext, ToolResult

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Registry for available tools.

    Stateless with respect to sessions: the same registry is shared by every
    session and receives the session through the ToolContext on dispatch.
    """

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        """Register a tool."""
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' already registered")
        self._tools[tool.name] = tool

    def get(self, name: str) -> Tool | None:
        """Get a tool by name."""
        return self._tools.get(name)

    def list_tools(self) -> list[str]:
        """List all registered tool names."""
        return list(self._tools.keys())

    def get_tools_schema(self) -> list[dict[str, Any]]:
        """Get schemas for all tools (for LLM function calling)."""
        return [tool.get_schema() for tool in self._tools.values()]

    async def dispatch(
        self, tool_name: str, args: dict[str, Any], context: ToolContext
    ) -> ToolResult:
        """Dispatch a tool call by name. Never raises."""
        tool = self._tools.get(tool_name)

        if tool is None:
            return ToolResult(
                success=False,
                error=f"Unsupported tool: {tool_name}",
            )

        valid, error = tool.validate_args(args)
        if not valid:
            return ToolResult(success=False, error=error)

        try:
            return await tool.execute(context, **args)
        except Exception as e:
            logger.warning(f"Tool '{tool_name}' raised: {e}")
            return ToolResult(
                success=False,
                error=f"Tool execution failed: {e}",
            )
