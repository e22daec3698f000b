"""
Base classes for the tool interface.

This module defines the core abstractions for tools in Relay:
- Tool: Abstract base class that all tools must implement
- ToolContext: Runtime context passed to tools on every call

Design Principles:
    - Tools are stateless capability objects; they may be shared by
      concurrent executor calls, so they keep no per-call mutable fields
    - Step history reaches a tool explicitly through ToolContext.steps,
      a read-only snapshot of the ledger at dispatch time
    - Tools return the observation string; any exception raised from call()
      is fatal to the executor call and propagated unchanged
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from relay.cancellation import CancellationToken
from relay.schema import AgentStep


@dataclass(frozen=True)
class ToolContext:
    """
    Runtime context passed to tools during a call.

    Attributes:
        cancel_token: Cancellation context of the executor call; long-running
            tools should poll it or call raise_if_cancelled()
        steps: Snapshot of the ledger when the action was dispatched
        metadata: Additional caller-defined context
    """

    cancel_token: CancellationToken = field(default_factory=CancellationToken)
    steps: tuple[AgentStep, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)


class Tool(ABC):
    """
    Abstract base class for all Relay tools.

    Subclasses must implement:
    - name property: Returns the tool's identifier (matched case-insensitively)
    - call(): Performs the tool's action and returns the observation

    Example:
        class EchoTool(Tool):
            @property
            def name(self) -> str:
                return "echo"

            def call(self, tool_input: str, context: ToolContext) -> str:
                return tool_input
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The tool's identifier."""
        ...

    @property
    def description(self) -> str:
        """
        Human-readable description of what the tool does.

        Planners render this into their prompts. Override in subclasses.
        """
        return f"Tool: {self.name}"

    @abstractmethod
    def call(self, tool_input: str, context: ToolContext) -> str:
        """
        Invoke the tool.

        Args:
            tool_input: The action's input string
            context: Runtime context with cancellation token and ledger snapshot

        Returns:
            The observation string recorded in the ledger

        Raises:
            Exception: Any failure; the executor aborts the call and
                re-raises it unchanged
        """
        ...

    def __repr__(self) -> str:
        """String representation of the tool."""
        return f"<Tool: {self.name}>"
