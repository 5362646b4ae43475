"""
Tool Registry - the fixed set of operations the server exposes.

The registry is populated once at startup by register_builtin_tools() and
is read-only afterwards. Lookups of names outside the set raise
UnknownOperationError, which the dispatcher reports as a protocol error.

Pattern: Service Registry (tool inventory with callable handlers)
"""

import logging

from npm_helper.core.exceptions import UnknownOperationError
from npm_helper.models.domain import RegisteredTool, ToolDefinition

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Registry for the server's tools.

    Tools are kept in registration order, which is also the order
    tools/list advertises them in.

    Attributes:
        _tools: Dictionary mapping tool names to RegisteredTool instances.

    Example:
        >>> registry = ToolRegistry()
        >>> registry.register("search_npm", search_tool)
        >>> tool = registry.get("search_npm")
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._tools: dict[str, RegisteredTool] = {}

    def register(self, name: str, tool: RegisteredTool) -> None:
        """
        Register a tool under the given name.

        Args:
            name: The name to register the tool under.
            tool: The RegisteredTool instance to register.

        Raises:
            ValueError: If the name is taken or does not match the tool's
                own definition.
        """
        if name != tool.name:
            raise ValueError(f"Tool registered as {name!r} is named {tool.name!r}")
        if name in self._tools:
            raise ValueError(f"Tool already registered: {name}")
        self._tools[name] = tool
        logger.debug(f"Registered tool: {name}")

    def get(self, name: str) -> RegisteredTool:
        """
        Get a registered tool by name.

        Raises:
            UnknownOperationError: If the tool is not registered.
        """
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownOperationError(name) from None

    def has(self, name: str) -> bool:
        return name in self._tools

    def names(self) -> list[str]:
        return list(self._tools)

    # Shadows the builtin for the rest of the class body: no list[...]
    # annotations below this method.
    def list(self) -> list[ToolDefinition]:
        """
        List all registered tool definitions, in registration order.

        Returns:
            List of ToolDefinition instances.
        """
        return [tool.definition for tool in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)
