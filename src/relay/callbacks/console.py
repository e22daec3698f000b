"""
Observer that prints executor progress with Rich.

Used by `relay run --verbose` to show actions as they are dispatched.
"""

from typing import Sequence

from rich.console import Console
from rich.markup import escape

from relay.callbacks.base import Observer
from relay.schema import AgentAction, AgentFinish, AgentStep

MAX_INPUT_CHARS = 120


class ConsoleObserver(Observer):
    """
    Print one line per action and a short summary on finish.

    Attributes:
        console: Rich console to print to
        actions_seen: Number of actions printed so far
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self.actions_seen = 0

    def on_action(self, action: AgentAction) -> None:
        self.actions_seen += 1
        tool_input = action.tool_input
        if len(tool_input) > MAX_INPUT_CHARS:
            tool_input = tool_input[:MAX_INPUT_CHARS] + "..."
        self.console.print(
            f"[cyan]→[/cyan] [bold]{escape(action.tool)}[/bold] [dim]{escape(tool_input)}[/dim]"
        )

    def on_finish(self, finish: AgentFinish, steps: Sequence[AgentStep]) -> None:
        output = finish.return_values.get("output", "")
        self.console.print(
            f"[green]■[/green] finished after {len(steps)} step(s): {escape(str(output))}"
        )
