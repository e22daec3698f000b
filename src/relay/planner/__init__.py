"""
Planner module for Relay.

The planner decides, round by round, which actions the executor should
dispatch or declares completion with an AgentFinish.

Components:
    - Planner: Abstract base class for all planners
    - PlanResult: What a planner returns each round
    - ScriptedPlanner: Replays pre-recorded rounds
    - OllamaPlanner: ReAct prompting against a local Ollama model

Usage:
    from relay.planner import PlanResult, ScriptedPlanner

    planner = ScriptedPlanner(
        [
            PlanResult.act(AgentAction(tool="search", tool_input="capital of France")),
            PlanResult.done(output="Paris"),
        ],
        tools=[search_tool],
    )
"""

from relay.planner.base import PlanResult, Planner
from relay.planner.ollama import OllamaConfig, OllamaPlanner
from relay.planner.scripted import ScriptedPlanner

__all__ = [
    "OllamaConfig",
    "OllamaPlanner",
    "PlanResult",
    "Planner",
    "ScriptedPlanner",
]
