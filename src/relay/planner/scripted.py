"""
Scripted planner.

Replays a fixed sequence of rounds instead of consulting a model. Used by
YAML scenarios and tests to drive the executor deterministically.

A round is either a PlanResult or an exception instance, which is raised
when the round is reached (e.g. a PlannerParseError to exercise recovery).
Once the script is exhausted the planner returns an empty PlanResult, which
the executor reports as AgentNoReturnError.

Unlike model-backed planners this one keeps a cursor, so an instance must
not be shared between concurrent executor calls. Use reset() to replay it.
"""

from typing import Any, Mapping, Sequence

from relay.cancellation import CancellationToken
from relay.planner.base import PlanResult, Planner
from relay.schema import AgentStep
from relay.tools.base import Tool


class ScriptedPlanner(Planner):
    """
    Planner that returns pre-recorded rounds in order.

    Attributes:
        rounds: The scripted PlanResults or exceptions
        calls: Number of plan() invocations so far
        seen_steps: Ledger length observed on each plan() invocation
    """

    def __init__(
        self,
        rounds: Sequence[PlanResult | Exception],
        tools: Sequence[Tool] = (),
        input_keys: Sequence[str] = ("input",),
        output_keys: Sequence[str] = ("output",),
    ) -> None:
        self.rounds = list(rounds)
        self._tools = list(tools)
        self._input_keys = list(input_keys)
        self._output_keys = list(output_keys)
        self.calls = 0
        self.seen_steps: list[int] = []

    def plan(
        self,
        steps: Sequence[AgentStep],
        inputs: Mapping[str, str],
        cancel_token: CancellationToken,
    ) -> PlanResult:
        cancel_token.raise_if_cancelled(phase="planning")
        self.seen_steps.append(len(steps))
        index = self.calls
        self.calls += 1

        if index >= len(self.rounds):
            return PlanResult()

        scripted = self.rounds[index]
        if isinstance(scripted, Exception):
            raise scripted
        return scripted

    def reset(self) -> None:
        """Rewind the script to the first round."""
        self.calls = 0
        self.seen_steps = []

    def get_tools(self) -> list[Tool]:
        return list(self._tools)

    def get_input_keys(self) -> list[str]:
        return list(self._input_keys)

    def get_output_keys(self) -> list[str]:
        return list(self._output_keys)

    def get_config(self) -> dict[str, Any]:
        return {"backend": "scripted", "rounds": len(self.rounds)}
