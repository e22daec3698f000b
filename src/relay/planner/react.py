"""
ReAct text format for model-backed planners.

Models are prompted to answer in the Thought/Action/Action Input/Observation
format and finish with "Final Answer:". This module renders the prompt and
the scratchpad (the ledger replayed as text) and parses model output back
into a PlanResult.

Design Principles:
    - Model output is untrusted; anything that is neither a final answer nor
      a complete action raises PlannerParseError
    - A final answer wins over an action in the same response
    - Synthetic ledger steps (empty action) are replayed as bare observations
"""

import re
from typing import Mapping, Sequence

from relay.errors import PlannerParseError
from relay.planner.base import PlanResult
from relay.schema import AgentAction, AgentFinish, AgentStep
from relay.tools.base import Tool

FINAL_ANSWER_PREFIX = "Final Answer:"
OBSERVATION_PREFIX = "Observation:"

REACT_PROMPT_TEMPLATE = """Answer the following question as best you can. You have access to the following tools:

{tools}

Use the following format:

Question: the input question you must answer
Thought: you should always think about what to do
Action: the action to take, should be one of [{tool_names}]
Action Input: the input to the action
Observation: the result of the action
... (this Thought/Action/Action Input/Observation can repeat N times)
Thought: I now know the final answer
Final Answer: the final answer to the original input question

Begin!
{history}
Question: {input}
{scratchpad}"""

_FINAL_ANSWER_RE = re.compile(r"Final Answer:\s*(.*)$", re.DOTALL | re.IGNORECASE)
_ACTION_RE = re.compile(
    r"Action\s*:\s*(.*?)\s*Action\s*Input\s*:\s*(.*?)\s*(?=Observation:|Thought:|$)",
    re.DOTALL | re.IGNORECASE,
)


def format_tools(tools: Sequence[Tool]) -> str:
    """Render tool names and descriptions, one per line."""
    if not tools:
        return "No tools available."
    return "\n".join(f"- {tool.name}: {tool.description}" for tool in tools)


def format_scratchpad(steps: Sequence[AgentStep]) -> str:
    """Replay the ledger as ReAct text, ending with a fresh Thought."""
    if not steps:
        return "Thought:"

    parts = []
    for step in steps:
        if step.action.log:
            parts.append(step.action.log)
        parts.append(f"{OBSERVATION_PREFIX} {step.observation}")
    parts.append("Thought:")
    return "\n".join(parts)


def render_prompt(
    tools: Sequence[Tool],
    steps: Sequence[AgentStep],
    inputs: Mapping[str, str],
    input_key: str = "input",
) -> str:
    """Build the full ReAct prompt for one planning round."""
    history = inputs.get("history", "")
    return REACT_PROMPT_TEMPLATE.format(
        tools=format_tools(tools),
        tool_names=", ".join(tool.name for tool in tools),
        history=f"\nPrevious conversation:\n{history}\n" if history else "",
        input=inputs.get(input_key, ""),
        scratchpad=format_scratchpad(steps),
    )


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def parse_react_output(text: str, planner: str = "", model: str = "") -> PlanResult:
    """
    Parse a ReAct response into a PlanResult.

    Args:
        text: Raw model output
        planner: Planner name, for error context
        model: Model name, for error context

    Returns:
        PlanResult with either a finish or a single action

    Raises:
        PlannerParseError: If the text holds neither a final answer nor an action
    """
    final_match = _FINAL_ANSWER_RE.search(text)
    if final_match:
        return PlanResult(
            finish=AgentFinish(
                return_values={"output": final_match.group(1).strip()},
                log=text,
            )
        )

    action_match = _ACTION_RE.search(text)
    if action_match is None:
        raise PlannerParseError(
            planner=planner,
            model=model,
            raw_response=text,
            parse_error="no Action/Action Input or Final Answer found",
        )

    tool = action_match.group(1).strip()
    tool_input = _strip_quotes(action_match.group(2).strip())
    if not tool:
        raise PlannerParseError(
            planner=planner,
            model=model,
            raw_response=text,
            parse_error="empty Action",
        )

    return PlanResult.act(AgentAction(tool=tool, tool_input=tool_input, log=text))
