"""
Tool registry for Relay.

The executor builds one registry per call from the tools its planner
declares, then resolves every planner action through it.

Design:
    - Names are canonicalized to upper case, so lookup is case-insensitive
    - Duplicate names: last registered wins and a warning is logged;
      ToolRegistry(strict=True) raises DuplicateToolError instead
    - The name "none" is reserved: an action naming it asks the planner to
      write its final answer, so no tool may register under it
    - Resolution returns an explicit outcome instead of a magic string check

Usage:
    registry = ToolRegistry.from_tools(planner.get_tools())
    resolved = registry.resolve("Search")
    if resolved.kind is ToolResolution.FOUND:
        observation = resolved.tool.call(tool_input, context)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator

from relay.errors import DuplicateToolError, ToolNotFoundError
from relay.logging import get_logger
from relay.tools.base import Tool

logger = get_logger("relay.tools.registry")

FINAL_ANSWER_SENTINEL = "NONE"


class ToolResolution(str, Enum):
    """Outcome of resolving an action's tool name."""

    FOUND = "found"
    FINAL_ANSWER = "final_answer"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ResolvedTool:
    """Result of ToolRegistry.resolve(); tool is set only when FOUND."""

    kind: ToolResolution
    name: str
    tool: Tool | None = None


def canonical_name(name: str) -> str:
    """Canonical (upper case) form of a tool name."""
    return name.upper()


class ToolRegistry:
    """
    Case-insensitive registry for looking up tools by name.

    Attributes:
        strict: Reject duplicate names instead of replacing the earlier tool
    """

    def __init__(self, strict: bool = False) -> None:
        """Initialize an empty registry."""
        self.strict = strict
        self._tools: dict[str, Tool] = {}

    @classmethod
    def from_tools(cls, tools: Iterable[Tool], strict: bool = False) -> "ToolRegistry":
        """Build a registry from a list of tools, in order."""
        registry = cls(strict=strict)
        for tool in tools:
            registry.register(tool)
        return registry

    def register(self, tool: Tool) -> None:
        """
        Register a tool in the registry.

        Args:
            tool: The tool instance to register

        Raises:
            ValueError: If tool is None, has an empty name, or uses the
                reserved name "none"
            DuplicateToolError: If strict and the name is already taken
        """
        if tool is None:
            msg = "Cannot register None as a tool"
            raise ValueError(msg)

        name = tool.name
        if not name:
            msg = "Tool must have a non-empty name"
            raise ValueError(msg)

        key = canonical_name(name)
        if key == FINAL_ANSWER_SENTINEL:
            msg = f"Tool name {name!r} is reserved"
            raise ValueError(msg)

        if key in self._tools:
            if self.strict:
                raise DuplicateToolError(tool=name)
            logger.warning(
                "Duplicate tool name, replacing earlier registration",
                tool=name,
                replaced=self._tools[key].name,
            )

        self._tools[key] = tool

    def resolve(self, name: str) -> ResolvedTool:
        """
        Resolve an action's tool name.

        Returns:
            ResolvedTool with kind FOUND (tool set), FINAL_ANSWER for the
            reserved "none" name, or UNKNOWN
        """
        key = canonical_name(name)
        tool = self._tools.get(key)
        if tool is not None:
            return ResolvedTool(kind=ToolResolution.FOUND, name=name, tool=tool)
        if key == FINAL_ANSWER_SENTINEL:
            return ResolvedTool(kind=ToolResolution.FINAL_ANSWER, name=name)
        return ResolvedTool(kind=ToolResolution.UNKNOWN, name=name)

    def get(self, name: str) -> Tool:
        """
        Look up a tool by name.

        Raises:
            ToolNotFoundError: If no tool with that name is registered
        """
        tool = self._tools.get(canonical_name(name))
        if tool is None:
            raise ToolNotFoundError(tool=name)
        return tool

    def get_optional(self, name: str) -> Tool | None:
        """Look up a tool by name, returning None if not found."""
        return self._tools.get(canonical_name(name))

    def list_tools(self) -> list[str]:
        """List registered tool names (as declared) in sorted order."""
        return sorted(tool.name for tool in self._tools.values())

    def __len__(self) -> int:
        """Return the number of registered tools."""
        return len(self._tools)

    def __iter__(self) -> Iterator[Tool]:
        """Iterate over all registered tools."""
        return iter(self._tools.values())

    def __contains__(self, name: str) -> bool:
        """Check if a tool is registered using 'in' operator."""
        return canonical_name(name) in self._tools

    def __repr__(self) -> str:
        """String representation of the registry."""
        tools = ", ".join(self.list_tools())
        return f"<ToolRegistry: [{tools}]>"
