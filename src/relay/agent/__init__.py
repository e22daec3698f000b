"""
Relay agent module.

This module provides the execution loop that drives a planner and its
tools through a plan -> act -> observe cycle:

1. Planner proposes actions (or a finish) from the task and the ledger
2. Executor resolves each action to a tool and calls it
3. The observation is appended to the ledger and fed back to the planner

Usage:
    from relay.agent import Executor, run_text

    executor = Executor(planner, ExecutorConfig(max_iterations=5))
    answer = run_text(executor, "What is the capital of France?")
"""

from relay.agent.chain import run_chain, run_text
from relay.agent.executor import (
    ExecutionResult,
    Executor,
    ParserErrorHandler,
    inputs_to_strings,
)

__all__ = [
    "ExecutionResult",
    "Executor",
    "ParserErrorHandler",
    "inputs_to_strings",
    "run_chain",
    "run_text",
]
