"""
Chain-style entry points around an Executor.

run_chain() threads the executor's memory through a call: stored variables
are merged into the inputs, required input keys are checked, and a finished
exchange is saved back. run_text() is the single-input, single-output
shorthand.
"""

from typing import Any, Mapping

from relay.agent.executor import Executor
from relay.cancellation import CancellationToken
from relay.errors import MissingInputError
from relay.schema import ExecutionStatus


def run_chain(
    executor: Executor,
    inputs: Mapping[str, Any],
    cancel_token: CancellationToken | None = None,
) -> dict[str, Any]:
    """
    Call the executor with memory variables merged into the inputs.

    The exchange is saved to memory only when the planner finished.

    Raises:
        MissingInputError: A key the planner expects is absent after merging
        ValueError: The memory cannot tell which input to record; raised
            before the planner runs
        Everything Executor.call() raises
    """
    full_inputs = dict(inputs)
    memory = executor.memory
    if memory is not None:
        memory.check_inputs(inputs)
        full_inputs.update(memory.load_memory_variables(inputs))

    missing = [key for key in executor.input_keys if key not in full_inputs]
    if missing:
        raise MissingInputError(missing_keys=missing)

    result = executor.execute(full_inputs, cancel_token)
    result.raise_for_status()

    if memory is not None and result.status is ExecutionStatus.FINISHED:
        memory.save_context(inputs, result.outputs)
    return result.outputs


def run_text(
    executor: Executor,
    text: str,
    cancel_token: CancellationToken | None = None,
) -> str:
    """
    Run an executor whose planner takes one input and gives one output.

    Returns:
        The output value as a string; "" when the call was stopped by a
        repeated action

    Raises:
        ValueError: If the planner does not have exactly one input and one
            output key
    """
    input_keys = executor.input_keys
    output_keys = executor.output_keys
    if len(input_keys) != 1 or len(output_keys) != 1:
        msg = (
            "run_text needs exactly one input and one output key, "
            f"got inputs={input_keys} outputs={output_keys}"
        )
        raise ValueError(msg)

    outputs = run_chain(executor, {input_keys[0]: text}, cancel_token)
    return str(outputs.get(output_keys[0], ""))
