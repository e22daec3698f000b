"""
Build runnable executors from scenario files.

A scenario bundles the task inputs, the executor configuration, the planner
backend and a set of canned tools. With the scripted backend, its turns are
replayed as planner rounds; with the ollama backend the turns are ignored
and a model does the planning.

Example scenario:
    inputs:
      input: What is the capital of France?
    executor:
      max_iterations: 5
    tools:
      - name: search
        responses:
          capital of France: Paris
    turns:
      - actions:
          - tool: search
            tool_input: capital of France
      - finish:
          output: Paris
"""

from dataclasses import dataclass
from typing import Any

from relay.agent.executor import Executor, ParserErrorHandler
from relay.callbacks.base import Observer
from relay.errors import PlannerParseError
from relay.planner.base import PlanResult, Planner
from relay.planner.ollama import OllamaPlanner
from relay.planner.scripted import ScriptedPlanner
from relay.schema import AgentFinish, ExecutorConfig, Scenario, ScenarioTurn
from relay.tools.base import Tool
from relay.tools.simple import StaticTool


@dataclass
class ScenarioRun:
    """Everything needed to run a scenario once."""

    executor: Executor
    inputs: dict[str, Any]


def build_tools(scenario: Scenario) -> list[Tool]:
    """Create a StaticTool for every tool declared in the scenario."""
    return [
        StaticTool(
            name=declared.name,
            responses=declared.responses,
            default=declared.default,
            description=declared.description,
            fail=declared.fail,
        )
        for declared in scenario.tools
    ]


def turn_to_round(turn: ScenarioTurn) -> PlanResult | Exception:
    """Translate a scripted turn into what ScriptedPlanner replays."""
    if turn.parse_error is not None:
        return PlannerParseError(
            planner="scripted",
            raw_response=turn.parse_error,
            parse_error="scripted parse error",
        )
    finish = AgentFinish(return_values=turn.finish) if turn.finish is not None else None
    return PlanResult(actions=list(turn.actions), finish=finish)


def build_planner(scenario: Scenario, tools: list[Tool]) -> Planner:
    """Create the planner backend the scenario asks for."""
    if scenario.planner.backend == "ollama":
        return OllamaPlanner(scenario.planner, tools=tools)
    return ScriptedPlanner([turn_to_round(turn) for turn in scenario.turns], tools=tools)


def build_scenario_run(
    scenario: Scenario,
    config: ExecutorConfig | None = None,
    observer: Observer | None = None,
) -> ScenarioRun:
    """
    Assemble planner, tools and executor for a scenario.

    Args:
        scenario: The loaded scenario
        config: Overrides the scenario's executor section when given
        observer: Optional observer to attach
    """
    config = config or scenario.executor
    tools = build_tools(scenario)
    planner = build_planner(scenario, tools)
    error_handler = ParserErrorHandler() if config.handle_parsing_errors else None
    executor = Executor(planner, config, error_handler=error_handler, observer=observer)
    return ScenarioRun(executor=executor, inputs=dict(scenario.inputs))
