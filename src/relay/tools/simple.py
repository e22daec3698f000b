"""
Ready-made tool adapters.

- FunctionTool: exposes a plain callable as a tool
- StaticTool: answers from a fixed table of responses (scenarios, demos, tests)
"""

from typing import Callable

from relay.errors import ToolExecutionError
from relay.tools.base import Tool, ToolContext


class FunctionTool(Tool):
    """
    Wrap a function as a tool.

    The function receives the input string, and the ToolContext too when
    pass_context is set.

    Example:
        upper = FunctionTool("upper", str.upper, description="Upper-case text")
    """

    def __init__(
        self,
        name: str,
        func: Callable[..., str],
        description: str = "",
        pass_context: bool = False,
    ) -> None:
        self._name = name
        self._func = func
        self._description = description
        self._pass_context = pass_context

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description or super().description

    def call(self, tool_input: str, context: ToolContext) -> str:
        if self._pass_context:
            return str(self._func(tool_input, context))
        return str(self._func(tool_input))


class StaticTool(Tool):
    """
    Tool that answers from a lookup table.

    Inputs are matched exactly. Unmatched inputs get the default response,
    or raise ToolExecutionError when no default is set.

    Attributes:
        responses: Input string to observation mapping
        default: Observation for unmatched inputs
        fail: Always raise, to exercise fatal tool failures
    """

    def __init__(
        self,
        name: str,
        responses: dict[str, str] | None = None,
        default: str | None = None,
        description: str = "",
        fail: bool = False,
    ) -> None:
        self._name = name
        self.responses = dict(responses or {})
        self.default = default
        self._description = description
        self.fail = fail

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description or super().description

    def call(self, tool_input: str, context: ToolContext) -> str:
        context.cancel_token.raise_if_cancelled(phase=f"tool {self._name}")
        if self.fail:
            raise ToolExecutionError(
                tool=self._name,
                tool_input=tool_input,
                underlying_error="configured to fail",
            )
        if tool_input in self.responses:
            return self.responses[tool_input]
        if self.default is not None:
            return self.default
        raise ToolExecutionError(
            tool=self._name,
            tool_input=tool_input,
            underlying_error="no response for input",
        )
