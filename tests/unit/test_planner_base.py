"""
Tests for planner base classes and the scripted planner.

Tests:
    - PlanResult constructors
    - Planner default hooks
    - ScriptedPlanner replay, exceptions, exhaustion and reset
"""

import pytest

from relay.cancellation import CancellationToken
from relay.errors import ExecutionCancelledError, PlannerParseError
from relay.planner.base import PlanResult, Planner
from relay.planner.scripted import ScriptedPlanner
from relay.schema import AgentAction, AgentStep


class MinimalPlanner(Planner):
    """Planner implementing only the abstract methods."""

    def plan(self, steps, inputs, cancel_token):
        return PlanResult.done(output=inputs["input"])

    def get_tools(self):
        return []


class TestPlanResult:
    """Tests for PlanResult."""

    def test_empty(self):
        """A default result has neither actions nor finish."""
        result = PlanResult()
        assert result.actions == []
        assert result.finish is None
        assert result.is_empty

    def test_act(self):
        """act() keeps action order."""
        a = AgentAction(tool="search", tool_input="a")
        b = AgentAction(tool="search", tool_input="b")
        result = PlanResult.act(a, b)
        assert result.actions == [a, b]
        assert result.finish is None
        assert not result.is_empty

    def test_done_with_output(self):
        """done() stores output under "output"."""
        result = PlanResult.done(output="Paris")
        assert result.finish is not None
        assert result.finish.return_values == {"output": "Paris"}
        assert not result.is_empty

    def test_done_with_extra_values(self):
        """Extra return values are kept."""
        result = PlanResult.done(output="Paris", source="search")
        assert result.finish.return_values == {"output": "Paris", "source": "search"}

    def test_done_without_output(self):
        """done() without output gives an empty finish, which is still a finish."""
        result = PlanResult.done()
        assert result.finish is not None
        assert result.finish.return_values == {}
        assert not result.is_empty


class TestPlannerDefaults:
    """Tests for Planner default hooks."""

    def test_cannot_instantiate_abstract(self):
        """Planner itself is abstract."""
        with pytest.raises(TypeError):
            Planner()  # type: ignore[abstract]

    def test_default_keys(self):
        """Planners take "input" and give "output" by default."""
        planner = MinimalPlanner()
        assert planner.get_input_keys() == ["input"]
        assert planner.get_output_keys() == ["output"]

    def test_default_name(self):
        """The class name is the default planner name."""
        assert MinimalPlanner().get_name() == "MinimalPlanner"

    def test_default_config(self):
        """The default config is empty."""
        assert MinimalPlanner().get_config() == {}


class TestScriptedPlanner:
    """Tests for ScriptedPlanner."""

    def test_replays_rounds_in_order(self):
        """Rounds come back one per call."""
        first = PlanResult.act(AgentAction(tool="search", tool_input="x"))
        second = PlanResult.done(output="Paris")
        planner = ScriptedPlanner([first, second])
        token = CancellationToken()

        assert planner.plan((), {"input": "q"}, token) is first
        assert planner.plan((), {"input": "q"}, token) is second
        assert planner.calls == 2

    def test_exhausted_returns_empty(self):
        """Past the script the planner returns nothing."""
        planner = ScriptedPlanner([])
        assert planner.plan((), {}, CancellationToken()).is_empty

    def test_exception_rounds_are_raised(self):
        """Exception instances are raised when reached."""
        error = PlannerParseError(raw_response="???")
        planner = ScriptedPlanner([error])
        with pytest.raises(PlannerParseError) as exc_info:
            planner.plan((), {}, CancellationToken())
        assert exc_info.value is error

    def test_records_ledger_lengths(self):
        """seen_steps records the ledger size on each call."""
        planner = ScriptedPlanner([PlanResult(), PlanResult()])
        token = CancellationToken()
        planner.plan((), {}, token)
        planner.plan((AgentStep(observation="x"),), {}, token)
        assert planner.seen_steps == [0, 1]

    def test_checks_cancellation(self):
        """A cancelled token stops planning."""
        token = CancellationToken()
        token.cancel()
        planner = ScriptedPlanner([PlanResult.done(output="x")])
        with pytest.raises(ExecutionCancelledError):
            planner.plan((), {}, token)
        assert planner.calls == 0

    def test_reset(self):
        """reset() rewinds the script."""
        round_ = PlanResult.done(output="x")
        planner = ScriptedPlanner([round_])
        token = CancellationToken()
        planner.plan((), {}, token)
        planner.reset()
        assert planner.calls == 0
        assert planner.seen_steps == []
        assert planner.plan((), {}, token) is round_

    def test_keys_and_tools(self, search_tool):
        """Keys and tools come from the constructor."""
        planner = ScriptedPlanner(
            [],
            tools=[search_tool],
            input_keys=["question", "history"],
            output_keys=["answer"],
        )
        assert planner.get_tools() == [search_tool]
        assert planner.get_input_keys() == ["question", "history"]
        assert planner.get_output_keys() == ["answer"]
        assert planner.get_config() == {"backend": "scripted", "rounds": 0}
