"""
Schema definitions for Relay.

This module defines the Pydantic models used throughout Relay:
- AgentAction/AgentStep/AgentFinish: what the planner asks for and what happened
- ExecutorConfig: how the execution loop is bounded
- PlannerConfig: which planner backend to build and how to reach it
- Scenario*: a YAML-described run (inputs, tools, scripted planner rounds)

Design Decisions:
    - Ledger entries are frozen; the ledger never rewrites a step once appended
    - Config models forbid unknown fields so typos in YAML surface early
    - An AgentAction with an empty tool name is the "empty action" used for
      synthetic steps (recovered parse errors, last-chance hints)
"""

from enum import Enum
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from relay.errors import ConfigError

INTERMEDIATE_STEPS_KEY = "intermediate_steps"


# =============================================================================
# Enums
# =============================================================================


class ExecutionStatus(str, Enum):
    """How a single executor call ended (fatal errors raise instead)."""

    FINISHED = "finished"
    REPEATED_ACTION = "repeated_action"
    NOT_FINISHED = "not_finished"


# =============================================================================
# Ledger Models
# =============================================================================


class AgentAction(BaseModel):
    """
    A requested invocation of a named tool with a string input.

    Attributes:
        tool: Tool name, matched case-insensitively against the registry
        tool_input: The string handed to the tool
        log: Raw planner text that produced this action
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    tool: str = Field(default="", description="Tool name to invoke")
    tool_input: str = Field(default="", description="Input passed to the tool")
    log: str = Field(default="", description="Planner text behind this action")

    def same_call(self, other: "AgentAction") -> bool:
        """Structural equality on (tool, tool_input); log is ignored."""
        return self.tool == other.tool and self.tool_input == other.tool_input

    @property
    def is_empty(self) -> bool:
        return not self.tool and not self.tool_input


class AgentStep(BaseModel):
    """One completed (action, observation) round-trip in the ledger."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    action: AgentAction = Field(default_factory=AgentAction)
    observation: str = Field(default="", description="Result of executing the action")


class AgentFinish(BaseModel):
    """
    Terminal payload produced by the planner.

    By convention return_values carries an "output" entry; the executor
    does not validate its shape.
    """

    model_config = ConfigDict(extra="forbid")

    return_values: dict[str, Any] = Field(default_factory=dict)
    log: str = Field(default="", description="Planner text behind this finish")


# =============================================================================
# Configuration Models
# =============================================================================


class ExecutorConfig(BaseModel):
    """
    Configuration for one executor.

    Immutable for the lifetime of an executor call.

    Attributes:
        max_iterations: Upper bound on planner invocations per call
        return_intermediate_steps: Add the ledger to the outputs under
            INTERMEDIATE_STEPS_KEY
        stop_on_repeated_action: End the call (empty outputs, no error) when
            the planner repeats an action; when False the rest of the batch
            is skipped and the next planner round runs
        handle_parsing_errors: Install a default ParserErrorHandler when the
            executor is built from a file
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_iterations: int = Field(default=15, ge=0)
    return_intermediate_steps: bool = False
    stop_on_repeated_action: bool = True
    handle_parsing_errors: bool = False


class PlannerConfig(BaseModel):
    """
    Configuration for the planner backend.

    Only the fields relevant to the chosen backend are used.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    backend: Literal["scripted", "ollama"] = "scripted"
    base_url: str = "http://localhost:11434"
    model: str = "qwen2.5:0.5b"
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=3, ge=0)
    retry_delay_seconds: float = Field(default=1.0, ge=0)
    temperature: float = Field(default=0.1, ge=0)
    max_tokens: int = Field(default=1024, gt=0)


# =============================================================================
# Scenario Models
# =============================================================================


class ScenarioTool(BaseModel):
    """A tool with canned responses, declared in a scenario file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1)
    description: str = ""
    responses: dict[str, str] = Field(default_factory=dict)
    default: str | None = None
    fail: bool = Field(default=False, description="Raise instead of answering")


class ScenarioTurn(BaseModel):
    """
    One scripted planner round.

    A parse_error turn stands alone. Otherwise the turn mirrors a PlanResult:
    when both actions and finish are set the finish wins, and an empty turn
    makes the executor raise AgentNoReturnError.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    actions: list[AgentAction] = Field(default_factory=list)
    finish: dict[str, Any] | None = None
    parse_error: str | None = None

    @model_validator(mode="after")
    def check_single_outcome(self) -> "ScenarioTurn":
        """Reject turns that mix a parse error with a result."""
        if self.parse_error is not None and (self.actions or self.finish is not None):
            msg = "parse_error cannot be combined with actions or finish"
            raise ValueError(msg)
        return self


class Scenario(BaseModel):
    """A complete, file-described run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str | None = None
    inputs: dict[str, Any] = Field(default_factory=dict)
    executor: ExecutorConfig = Field(default_factory=ExecutorConfig)
    planner: PlannerConfig = Field(default_factory=PlannerConfig)
    tools: list[ScenarioTool] = Field(default_factory=list)
    turns: list[ScenarioTurn] = Field(default_factory=list)


# =============================================================================
# YAML Loading Helpers
# =============================================================================


def _load_yaml(path: Path | str) -> Any:
    path = Path(path)
    try:
        with path.open() as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(path=str(path), validation_error=str(e)) from e


def load_executor_config(path: Path | str) -> ExecutorConfig:
    """
    Load an executor configuration from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigError: If the YAML is malformed or doesn't match the schema
    """
    data = _load_yaml(path)
    try:
        return ExecutorConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(path=str(path), validation_error=str(e)) from e


def load_scenario(path: Path | str) -> Scenario:
    """
    Load a scenario from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigError: If the YAML is malformed or doesn't match the schema
    """
    data = _load_yaml(path)
    try:
        return Scenario.model_validate(data)
    except ValidationError as e:
        raise ConfigError(path=str(path), validation_error=str(e)) from e


def load_scenario_from_string(content: str) -> Scenario:
    """Load a scenario from a YAML string."""
    try:
        return Scenario.model_validate(yaml.safe_load(content) or {})
    except (yaml.YAMLError, ValidationError) as e:
        raise ConfigError(validation_error=str(e)) from e
