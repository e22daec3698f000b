"""Observer that records executor notifications as structured log events."""

from typing import Sequence

from relay.callbacks.base import Observer
from relay.logging import get_logger
from relay.schema import AgentAction, AgentFinish, AgentStep


class LoggingObserver(Observer):
    """Log every dispatched action and the final result through structlog."""

    def __init__(self, name: str = "relay.observer") -> None:
        self.logger = get_logger(name)

    def on_action(self, action: AgentAction) -> None:
        self.logger.info("Agent action", tool=action.tool, tool_input=action.tool_input)

    def on_finish(self, finish: AgentFinish, steps: Sequence[AgentStep]) -> None:
        self.logger.info(
            "Agent finish",
            return_keys=sorted(finish.return_values),
            step_count=len(steps),
        )
