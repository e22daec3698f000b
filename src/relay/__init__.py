"""
Relay - Bounded execution loop for tool-using agents.

Relay drives a planner (an LLM-backed or scripted decision maker) and a set of
tools through a plan/act/observe loop until the planner produces a final answer.
It provides:
- A bounded iteration budget with a last-chance hint to the planner
- Repeated-action detection
- Recoverable parse errors fed back as observations
- A full step ledger, optionally returned with the outputs

Example usage:
    $ relay run scenario.yaml --intermediate-steps
    $ relay doctor --model qwen2.5:0.5b
"""

__version__ = "0.1.0"
__author__ = "Relay Contributors"

from relay.agent import Executor, ExecutionResult, ParserErrorHandler, run_chain, run_text
from relay.cancellation import CancellationToken
from relay.planner import PlanResult, Planner
from relay.schema import AgentAction, AgentFinish, AgentStep, ExecutorConfig
from relay.tools import Tool, ToolContext

__all__ = [
    "__version__",
    "__author__",
    "AgentAction",
    "AgentFinish",
    "AgentStep",
    "CancellationToken",
    "ExecutionResult",
    "Executor",
    "ExecutorConfig",
    "ParserErrorHandler",
    "PlanResult",
    "Planner",
    "Tool",
    "ToolContext",
    "run_chain",
    "run_text",
]
