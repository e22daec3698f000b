"""
Tools module for Relay.

Tools are the external capabilities the executor dispatches planner
actions to. Each tool takes a string input and returns a string observation.

Architecture:
    - Tool: Abstract base class defining the tool interface
    - ToolContext: Runtime context passed to tools (cancellation, ledger snapshot)
    - ToolRegistry: Case-insensitive name lookup built once per executor call
    - FunctionTool / StaticTool: Adapters for callables and canned responses
"""

from relay.tools.base import Tool, ToolContext
from relay.tools.registry import ResolvedTool, ToolRegistry, ToolResolution
from relay.tools.simple import FunctionTool, StaticTool

__all__ = [
    "FunctionTool",
    "ResolvedTool",
    "StaticTool",
    "Tool",
    "ToolContext",
    "ToolRegistry",
    "ToolResolution",
]
