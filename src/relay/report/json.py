"""
JSON report generator for Relay.

Generates structured JSON output for programmatic consumption: the call
status, the outputs, and every ledger step with its kind.

Design Principles:
    - Complete data: Include the whole ledger, synthetic steps too
    - Consistent schema: Same structure for finished and stopped calls
    - ISO timestamps: Standard datetime format
"""

import json
from datetime import UTC, datetime
from typing import Any

from relay.agent.executor import (
    FINAL_ANSWER_OBSERVATION,
    INVALID_TOOL_OBSERVATION,
    REPEATED_ACTION_OBSERVATION,
    ExecutionResult,
)
from relay.errors import RelayError
from relay.schema import INTERMEDIATE_STEPS_KEY, AgentStep

REPORT_VERSION = "1.0"


def step_kind(step: AgentStep) -> str:
    """
    Classify a ledger step for display.

    Returns one of "note" (synthetic step without an action), "repeated",
    "final_answer_hint", "invalid_tool" or "tool".
    """
    if step.action.is_empty:
        return "note"
    if step.observation == REPEATED_ACTION_OBSERVATION:
        return "repeated"
    if step.observation == FINAL_ANSWER_OBSERVATION:
        return "final_answer_hint"
    if step.observation == INVALID_TOOL_OBSERVATION.format(tool=step.action.tool):
        return "invalid_tool"
    return "tool"


def serialize_step(index: int, step: AgentStep) -> dict[str, Any]:
    return {
        "index": index,
        "kind": step_kind(step),
        "tool": step.action.tool,
        "tool_input": step.action.tool_input,
        "log": step.action.log,
        "observation": step.observation,
    }


def build_report_dict(
    result: ExecutionResult | None,
    error: RelayError | None = None,
) -> dict[str, Any]:
    """
    Build a report dictionary for an executor call.

    Args:
        result: The execution result, or None if the call failed
        error: The fatal error, if any

    Returns:
        Dictionary with the full report
    """
    report: dict[str, Any] = {
        "report_version": REPORT_VERSION,
        "generated_at": datetime.now(UTC).isoformat(),
        "status": result.status.value if result else "error",
        "error": error.to_dict() if error else None,
    }
    if result is None:
        return report

    outputs = {k: v for k, v in result.outputs.items() if k != INTERMEDIATE_STEPS_KEY}
    report.update({
        "planner": result.planner_name,
        "iterations": result.iterations,
        "max_iterations": result.max_iterations,
        "duration_seconds": round(result.duration_seconds, 6),
        "outputs": outputs,
        "steps": [serialize_step(i, step) for i, step in enumerate(result.steps)],
    })
    return report


def generate_json_report(
    result: ExecutionResult | None,
    error: RelayError | None = None,
    indent: int = 2,
) -> str:
    """Generate a JSON report string for an executor call."""
    return json.dumps(build_report_dict(result, error), indent=indent, default=str)
