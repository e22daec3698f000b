"""
Base classes for Relay planners.

This module defines the abstract interface that all planners must implement,
along with the result structure returned to the executor each round.

Design Principles:
    - Planners are stateless between calls (the ledger is passed explicitly)
    - Planners never mutate the ledger; they only read it
    - A planner must make forward progress: actions, a finish, or an error
    - Unparsable output is reported as PlannerParseError so the executor can
      decide whether to recover
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from relay.cancellation import CancellationToken
from relay.schema import AgentAction, AgentFinish, AgentStep
from relay.tools.base import Tool


@dataclass
class PlanResult:
    """
    What a planner decided in one round.

    Attributes:
        actions: Actions to dispatch, in order
        finish: Terminal result; when set, actions are ignored
    """

    actions: list[AgentAction] = field(default_factory=list)
    finish: AgentFinish | None = None

    @classmethod
    def act(cls, *actions: AgentAction) -> "PlanResult":
        """Create a result that dispatches the given actions."""
        return cls(actions=list(actions))

    @classmethod
    def done(cls, output: Any = None, **return_values: Any) -> "PlanResult":
        """Create a finishing result; output is stored under "output"."""
        values = dict(return_values)
        if output is not None:
            values["output"] = output
        return cls(finish=AgentFinish(return_values=values))

    @property
    def is_empty(self) -> bool:
        return not self.actions and self.finish is None


class Planner(ABC):
    """
    Abstract base class for planners.

    Planners decide the next action(s) given the task inputs and the ledger
    of steps so far, or declare completion with an AgentFinish.

    Implementations:
        - ScriptedPlanner: Replays a fixed sequence of rounds
        - OllamaPlanner: ReAct prompting against a local Ollama model

    Example Implementation:
        class MyPlanner(Planner):
            def plan(self, steps, inputs, cancel_token):
                if steps:
                    return PlanResult.done(output=steps[-1].observation)
                return PlanResult.act(AgentAction(tool="search", tool_input=inputs["input"]))

            def get_tools(self):
                return [SearchTool()]
    """

    @abstractmethod
    def plan(
        self,
        steps: Sequence[AgentStep],
        inputs: Mapping[str, str],
        cancel_token: CancellationToken,
    ) -> PlanResult:
        """
        Decide the next actions or finish.

        Args:
            steps: The ledger so far, oldest first (read-only)
            inputs: The validated, string-valued task inputs
            cancel_token: Cancellation context of the executor call

        Returns:
            PlanResult with actions and/or a finish

        Raises:
            PlannerParseError: The planner's output could not be structured
            PlannerError: Any other backend failure
            ExecutionCancelledError: Cancellation observed mid-planning
        """
        ...

    @abstractmethod
    def get_tools(self) -> list[Tool]:
        """Return the tools this planner intends to use."""
        ...

    def get_input_keys(self) -> list[str]:
        """Input keys the planner expects. Often "input"."""
        return ["input"]

    def get_output_keys(self) -> list[str]:
        """Output keys the planner's finish carries."""
        return ["output"]

    def get_name(self) -> str:
        """Return the planner's name for logging."""
        return self.__class__.__name__

    def get_config(self) -> dict[str, Any]:
        """Return planner configuration for debugging."""
        return {}
