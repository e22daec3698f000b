"""
Exception hierarchy for Relay.

All Relay exceptions inherit from RelayError, allowing callers to catch
all Relay-specific exceptions with a single except clause.

Exception Categories:
    - Executor errors: invalid inputs, planner gave nothing back, budget exhausted
    - Planner errors: unparsable output, backend unreachable
    - Tool errors: registry problems, failing tool calls
    - Config errors: invalid YAML configuration or scenario files

Tool exceptions raised by a tool's own call() are propagated unchanged by the
executor; ToolExecutionError exists for tool authors who want a coded error.
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Executor errors: 1xxx
ERROR_INPUT_NOT_STRING = 1001
ERROR_AGENT_NO_RETURN = 1002
ERROR_NOT_FINISHED = 1003
ERROR_EXECUTION_CANCELLED = 1004
ERROR_MISSING_INPUT = 1005

# Planner errors: 2xxx
ERROR_PLANNER_PARSE = 2001
ERROR_PLANNER_CONNECTION = 2002
ERROR_PLANNER_TIMEOUT = 2003
ERROR_PLANNER_MODEL_NOT_FOUND = 2004

# Tool errors: 3xxx
ERROR_TOOL_NOT_FOUND = 3001
ERROR_TOOL_EXECUTION_FAILED = 3002
ERROR_TOOL_DUPLICATE = 3003

# Config errors: 4xxx
ERROR_CONFIG_INVALID = 4001

NOT_FINISHED_MESSAGE = "agent not finished before max iterations"


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class RelayError(Exception):
    """
    Base exception for all Relay errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Executor Errors
# =============================================================================


@dataclass
class ExecutorError(RelayError):
    """Base class for errors raised by the execution loop itself."""


@dataclass
class InputNotStringError(ExecutorError):
    """Raised when a caller-supplied input value is not a string."""

    key: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Input values to the executor must be strings: {self.key}"
        if self.code == 0:
            self.code = ERROR_INPUT_NOT_STRING
        if not self.suggestion:
            self.suggestion = "Convert the input value to str before calling the executor"
        self.context["key"] = self.key


@dataclass
class AgentNoReturnError(ExecutorError):
    """Raised when the planner returns neither actions nor a finish."""

    planner: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = "no actions or finish was returned by the agent"
        if self.code == 0:
            self.code = ERROR_AGENT_NO_RETURN
        self.context["planner"] = self.planner


@dataclass
class NotFinishedError(ExecutorError):
    """
    Raised when the iteration budget is exhausted without a finish.

    Attributes:
        max_iterations: The configured iteration budget
        outputs: The (empty, or ledger-only) outputs map of the call
        steps: The ledger accumulated before the budget ran out
    """

    max_iterations: int = 0
    outputs: dict[str, Any] = field(default_factory=dict)
    steps: list[Any] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = NOT_FINISHED_MESSAGE
        if self.code == 0:
            self.code = ERROR_NOT_FINISHED
        if not self.suggestion:
            self.suggestion = "Increase max_iterations or simplify the task"
        self.context.update({
            "max_iterations": self.max_iterations,
            "step_count": len(self.steps),
        })


@dataclass
class ExecutionCancelledError(ExecutorError):
    """Raised when the caller's cancellation token fires at a suspension point."""

    phase: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Execution cancelled during {self.phase or 'execution'}"
        if self.code == 0:
            self.code = ERROR_EXECUTION_CANCELLED
        self.context["phase"] = self.phase


@dataclass
class MissingInputError(ExecutorError):
    """Raised when required planner input keys are absent."""

    missing_keys: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Missing input values: {', '.join(self.missing_keys)}"
        if self.code == 0:
            self.code = ERROR_MISSING_INPUT
        self.context["missing_keys"] = self.missing_keys


# =============================================================================
# Planner Errors
# =============================================================================


@dataclass
class PlannerError(RelayError):
    """
    Base class for planner backend errors.

    Attributes:
        planner: Name of the planner backend (e.g., "ollama")
        model: Model the planner was using
    """

    planner: str = ""
    model: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context.update({
            "planner": self.planner,
            "model": self.model,
        })


@dataclass
class PlannerParseError(PlannerError):
    """
    Raised when planner output cannot be structured into actions or a finish.

    This is the only planner failure the executor can recover from, and
    only when a ParserErrorHandler is configured.
    """

    raw_response: str = ""
    parse_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"unable to parse agent output: {self.raw_response}"
        if self.code == 0:
            self.code = ERROR_PLANNER_PARSE
        super().__post_init__()
        self.context.update({
            "raw_response": self.raw_response,
            "parse_error": self.parse_error,
        })


@dataclass
class PlannerConnectionError(PlannerError):
    """Raised when the planner backend cannot be reached."""

    url: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Cannot connect to {self.planner} at {self.url}"
            if self.underlying_error:
                self.message += f": {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_PLANNER_CONNECTION
        if not self.suggestion:
            self.suggestion = "Check that the planner backend is running and reachable"
        super().__post_init__()
        self.context.update({
            "url": self.url,
            "underlying_error": self.underlying_error,
        })


@dataclass
class PlannerTimeoutError(PlannerError):
    """Raised when the planner backend does not answer in time."""

    timeout_seconds: float = 0.0

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"{self.planner} timed out after {self.timeout_seconds}s"
        if self.code == 0:
            self.code = ERROR_PLANNER_TIMEOUT
        if not self.suggestion:
            self.suggestion = "Increase timeout_seconds or use a smaller model"
        super().__post_init__()
        self.context["timeout_seconds"] = self.timeout_seconds


@dataclass
class PlannerModelNotFoundError(PlannerError):
    """Raised when the requested model is not available on the backend."""

    available_models: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Model not found: {self.model}"
        if self.code == 0:
            self.code = ERROR_PLANNER_MODEL_NOT_FOUND
        if not self.suggestion:
            self.suggestion = f"Pull the model first (e.g. `ollama pull {self.model}`)"
        super().__post_init__()
        self.context["available_models"] = self.available_models


# =============================================================================
# Tool Errors
# =============================================================================


@dataclass
class ToolError(RelayError):
    """
    Base class for tool errors.

    Attributes:
        tool: Name of the tool involved
        tool_input: Input string that was provided
    """

    tool: str = ""
    tool_input: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context.update({
            "tool": self.tool,
            "tool_input": self.tool_input,
        })


@dataclass
class ToolNotFoundError(ToolError):
    """Raised when a tool is not registered."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Tool not found: {self.tool}"
        if self.code == 0:
            self.code = ERROR_TOOL_NOT_FOUND
        if not self.suggestion:
            self.suggestion = "Check tool name spelling or register the tool"
        super().__post_init__()


@dataclass
class ToolExecutionError(ToolError):
    """Raised by a tool when its invocation fails."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Tool {self.tool} failed: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_TOOL_EXECUTION_FAILED
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


@dataclass
class DuplicateToolError(ToolError):
    """Raised by a strict registry when two tools share a name."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Tool already registered: {self.tool}"
        if self.code == 0:
            self.code = ERROR_TOOL_DUPLICATE
        if not self.suggestion:
            self.suggestion = "Tool names are case-insensitive; rename one of the tools"
        super().__post_init__()


# =============================================================================
# Config Errors
# =============================================================================


@dataclass
class ConfigError(RelayError):
    """Raised when a configuration or scenario file cannot be loaded."""

    path: str = ""
    validation_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid configuration in {self.path or '<string>'}: {self.validation_error}"
        if self.code == 0:
            self.code = ERROR_CONFIG_INVALID
        self.context.update({
            "path": self.path,
            "validation_error": self.validation_error,
        })
