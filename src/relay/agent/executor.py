"""
Execution loop for Relay.

The Executor drives the plan -> act -> observe cycle for one task:

1. The planner receives the ledger and the inputs and returns actions or a finish
2. A finish ends the call immediately
3. Each action is checked for repetition, resolved through the tool
   registry and dispatched; its observation is appended to the ledger
4. The ledger is replayed to the planner on the next round

Safeguards:
    - Iteration budget: at most max_iterations planner invocations per call
    - Repetition guard: an action whose (tool, tool_input) already appears in
      the ledger stops the call with empty outputs and no error
    - Unknown tools and the reserved "none" tool become ledger observations
      instead of errors, so the planner can correct itself
    - Unparsable planner output is turned into an observation when a
      ParserErrorHandler is configured, and is fatal otherwise
    - A "last chance" hint is appended two rounds before the budget runs out

Failure policy:
    Tool exceptions, planner errors other than recovered parse errors, empty
    planner rounds and cancellation abort the call and propagate. Nothing is
    retried here.

Concurrency:
    An Executor holds no per-call state. The ledger, the registry and the
    cancellation token of a call live on the stack of execute(), so one
    executor may serve concurrent calls as long as its planner and tools are
    safe to share.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from relay.callbacks.base import Observer
from relay.cancellation import CancellationToken
from relay.errors import (
    NOT_FINISHED_MESSAGE,
    AgentNoReturnError,
    InputNotStringError,
    NotFinishedError,
    PlannerParseError,
)
from relay.logging import get_logger
from relay.memory.base import Memory
from relay.planner.base import Planner
from relay.schema import (
    INTERMEDIATE_STEPS_KEY,
    AgentAction,
    AgentFinish,
    AgentStep,
    ExecutionStatus,
    ExecutorConfig,
)
from relay.tools.base import ToolContext
from relay.tools.registry import ToolRegistry, ToolResolution

logger = get_logger("relay.agent.executor")

REPEATED_ACTION_OBSERVATION = (
    "ATTENTION: you are repeating the same action. Now, you have just 2 options: "
    "1. Write the final answer. 2. Write a different action"
)
FINAL_ANSWER_OBSERVATION = "ATTENTION: write the final answer. use the format -> Final Answer: "
INVALID_TOOL_OBSERVATION = "{tool} is not a valid tool, try another one"
LAST_CHANCE_OBSERVATION = "\n Important: Do you have enough data to answer? Provide the final answer \n"


@dataclass(frozen=True)
class ParserErrorHandler:
    """
    Recovery policy for unparsable planner output.

    When configured, a PlannerParseError becomes a ledger step whose
    observation is format(error message); the loop then moves on to the
    next round. Without a formatter the error message is used as is.
    """

    formatter: Callable[[str], str] | None = None

    def format(self, raw_error_message: str) -> str:
        if self.formatter is None:
            return raw_error_message
        return self.formatter(raw_error_message)

    @classmethod
    def with_message(cls, message: str) -> "ParserErrorHandler":
        """Handler that always answers with the same observation."""
        return cls(formatter=lambda _raw: message)


@dataclass
class ExecutionResult:
    """
    Outcome of one executor call that did not fail.

    Attributes:
        status: FINISHED, REPEATED_ACTION or NOT_FINISHED
        outputs: What call() returns (empty unless FINISHED, apart from the
            ledger when return_intermediate_steps is set)
        steps: The full ledger of the call
        iterations: Number of planner invocations made
        max_iterations: The iteration budget of the call
        planner_name: Name of the planner used
        duration_seconds: Wall-clock time of the call
    """

    status: ExecutionStatus
    outputs: dict[str, Any] = field(default_factory=dict)
    steps: list[AgentStep] = field(default_factory=list)
    iterations: int = 0
    max_iterations: int = 0
    planner_name: str = ""
    duration_seconds: float = 0.0

    def raise_for_status(self) -> None:
        """Raise NotFinishedError if the iteration budget ran out."""
        if self.status is ExecutionStatus.NOT_FINISHED:
            raise NotFinishedError(
                max_iterations=self.max_iterations,
                outputs=self.outputs,
                steps=list(self.steps),
            )


def inputs_to_strings(inputs: Mapping[str, Any]) -> dict[str, str]:
    """
    Check that every input value is a string.

    Raises:
        InputNotStringError: Naming the first offending key
    """
    validated: dict[str, str] = {}
    for key, value in inputs.items():
        if not isinstance(value, str):
            raise InputNotStringError(key=key)
        validated[key] = value
    return validated


class Executor:
    """
    Runs a planner against its tools until it finishes.

    Usage:
        executor = Executor(planner, ExecutorConfig(max_iterations=5))
        outputs = executor.call({"input": "What is the capital of France?"})

    Attributes:
        planner: Decides actions and declares completion
        config: Iteration budget and output options
        error_handler: Optional recovery policy for unparsable planner output
        observer: Optional side channel notified of actions and the finish
        memory: Optional conversation memory, used by run_chain()
    """

    def __init__(
        self,
        planner: Planner,
        config: ExecutorConfig | None = None,
        *,
        error_handler: ParserErrorHandler | None = None,
        observer: Observer | None = None,
        memory: Memory | None = None,
    ) -> None:
        self.planner = planner
        self.config = config or ExecutorConfig()
        if error_handler is None and self.config.handle_parsing_errors:
            error_handler = ParserErrorHandler()
        self.error_handler = error_handler
        self.observer = observer
        self.memory = memory

    @property
    def input_keys(self) -> list[str]:
        """Input keys the planner expects. Often "input"."""
        return self.planner.get_input_keys()

    @property
    def output_keys(self) -> list[str]:
        """Output keys the planner's finish carries."""
        return self.planner.get_output_keys()

    def call(
        self,
        inputs: Mapping[str, Any],
        cancel_token: CancellationToken | None = None,
    ) -> dict[str, Any]:
        """
        Run the loop and return the planner's return values.

        Returns:
            The finish's return values (plus the ledger under
            "intermediate_steps" when configured), or {} when the call was
            stopped by a repeated action

        Raises:
            InputNotStringError: A value in inputs is not a string
            AgentNoReturnError: The planner returned neither actions nor a finish
            NotFinishedError: The iteration budget ran out; carries outputs
            ExecutionCancelledError: cancel_token fired
            PlannerError: Planner failures that were not recovered
            Exception: Whatever a tool raised, unchanged
        """
        result = self.execute(inputs, cancel_token)
        result.raise_for_status()
        return result.outputs

    def execute(
        self,
        inputs: Mapping[str, Any],
        cancel_token: CancellationToken | None = None,
    ) -> ExecutionResult:
        """
        Run the loop and return the detailed result.

        Same as call(), except that running out of iterations is reported
        as status NOT_FINISHED instead of an exception.
        """
        start_time = time.monotonic()
        validated = inputs_to_strings(inputs)
        token = cancel_token or CancellationToken()
        registry = ToolRegistry.from_tools(self.planner.get_tools())
        planner_name = self.planner.get_name()
        max_iterations = self.config.max_iterations
        log = logger.bind(planner=planner_name)

        # Owned by this call only
        steps: list[AgentStep] = []

        log.info(
            "Executor call started",
            input_keys=sorted(validated),
            tools=registry.list_tools(),
            max_iterations=max_iterations,
        )

        for iteration in range(max_iterations):
            log.debug("Planner round", iteration=iteration, step_count=len(steps))
            outcome = self._do_iteration(steps, registry, validated, token, log)
            if outcome is not None:
                status, outputs = outcome
                log.info(
                    "Executor call ended",
                    status=status.value,
                    iterations=iteration + 1,
                    step_count=len(steps),
                )
                return ExecutionResult(
                    status=status,
                    outputs=outputs,
                    steps=steps,
                    iterations=iteration + 1,
                    max_iterations=max_iterations,
                    planner_name=planner_name,
                    duration_seconds=time.monotonic() - start_time,
                )

            if max_iterations > 2 and iteration == max_iterations - 2:
                steps.append(AgentStep(observation=LAST_CHANCE_OBSERVATION))

        log.warning(
            "Iteration budget exhausted without a finish",
            max_iterations=max_iterations,
            step_count=len(steps),
        )
        self._notify_finish(
            AgentFinish(return_values={"output": NOT_FINISHED_MESSAGE}),
            steps,
        )
        return ExecutionResult(
            status=ExecutionStatus.NOT_FINISHED,
            outputs=self._get_return(AgentFinish(), steps),
            steps=steps,
            iterations=max_iterations,
            max_iterations=max_iterations,
            planner_name=planner_name,
            duration_seconds=time.monotonic() - start_time,
        )

    def _do_iteration(
        self,
        steps: list[AgentStep],
        registry: ToolRegistry,
        inputs: dict[str, str],
        token: CancellationToken,
        log: Any,
    ) -> tuple[ExecutionStatus, dict[str, Any]] | None:
        """
        Run one planner round and dispatch its actions.

        Returns:
            (status, outputs) when the call ends this round, None to continue
        """
        token.raise_if_cancelled(phase="planning")
        try:
            plan = self.planner.plan(tuple(steps), inputs, token)
        except PlannerParseError as e:
            if self.error_handler is None:
                raise
            observation = self.error_handler.format(e.message)
            steps.append(AgentStep(observation=observation))
            log.info("Recovered from unparsable planner output", parse_error=e.parse_error)
            return None

        # A result that arrives after cancellation is discarded
        token.raise_if_cancelled(phase="planning")

        if plan.is_empty:
            raise AgentNoReturnError(planner=self.planner.get_name())

        if plan.finish is not None:
            self._notify_finish(plan.finish, steps)
            return ExecutionStatus.FINISHED, self._get_return(plan.finish, steps)

        for action in plan.actions:
            if self._is_repeated(steps, action):
                steps.append(AgentStep(action=action, observation=REPEATED_ACTION_OBSERVATION))
                log.warning(
                    "Repeated action detected",
                    tool=action.tool,
                    tool_input=action.tool_input,
                    stop=self.config.stop_on_repeated_action,
                )
                if self.config.stop_on_repeated_action:
                    return ExecutionStatus.REPEATED_ACTION, {}
                # Skip the rest of this batch and let the planner answer
                return None

            self._do_action(steps, registry, action, token, log)

        return None

    @staticmethod
    def _is_repeated(steps: list[AgentStep], action: AgentAction) -> bool:
        """True if an identical (tool, tool_input) is already in the ledger."""
        return any(step.action.same_call(action) for step in steps)

    def _do_action(
        self,
        steps: list[AgentStep],
        registry: ToolRegistry,
        action: AgentAction,
        token: CancellationToken,
        log: Any,
    ) -> None:
        """Resolve one action and append its step to the ledger."""
        self._notify_action(action)

        resolved = registry.resolve(action.tool)
        if resolved.kind is ToolResolution.FINAL_ANSWER:
            steps.append(AgentStep(action=action, observation=FINAL_ANSWER_OBSERVATION))
            return

        if resolved.kind is ToolResolution.UNKNOWN:
            log.info("Unknown tool requested", tool=action.tool)
            steps.append(
                AgentStep(
                    action=action,
                    observation=INVALID_TOOL_OBSERVATION.format(tool=action.tool),
                )
            )
            return

        token.raise_if_cancelled(phase=f"tool {action.tool}")
        context = ToolContext(cancel_token=token, steps=tuple(steps))
        log.debug("Dispatching tool", tool=resolved.tool.name, tool_input=action.tool_input)
        try:
            observation = resolved.tool.call(action.tool_input, context)
        except Exception as e:
            log.error("Tool call failed", tool=action.tool, error=str(e))
            raise

        steps.append(AgentStep(action=action, observation=observation))

    def _get_return(self, finish: AgentFinish, steps: list[AgentStep]) -> dict[str, Any]:
        outputs = dict(finish.return_values)
        if self.config.return_intermediate_steps:
            outputs[INTERMEDIATE_STEPS_KEY] = list(steps)
        return outputs

    def _notify_action(self, action: AgentAction) -> None:
        if self.observer is None:
            return
        try:
            self.observer.on_action(action)
        except Exception:
            logger.warning("Observer on_action raised; ignoring", exc_info=True)

    def _notify_finish(self, finish: AgentFinish, steps: list[AgentStep]) -> None:
        if self.observer is None:
            return
        try:
            self.observer.on_finish(finish, tuple(steps))
        except Exception:
            logger.warning("Observer on_finish raised; ignoring", exc_info=True)
