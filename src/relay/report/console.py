"""
Console report generator for Relay.

Renders an executor call with Rich: a header with the final status, a
timeline of ledger steps, and the outputs.

Design Principles:
    - Human-readable first: Optimize for quick scanning
    - Status at a glance: Use icons and colors per step kind
    - Progressive detail: Planner logs only in verbose mode
"""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from relay.agent.executor import ExecutionResult
from relay.report.json import step_kind
from relay.schema import INTERMEDIATE_STEPS_KEY, ExecutionStatus

# Step icons
ICON_TOOL = "[green]✓[/green]"
ICON_INVALID = "[red]✗[/red]"
ICON_REPEATED = "[yellow]⟳[/yellow]"
ICON_HINT = "[cyan]![/cyan]"
ICON_NOTE = "[dim]○[/dim]"

_KIND_ICONS = {
    "tool": ICON_TOOL,
    "invalid_tool": ICON_INVALID,
    "repeated": ICON_REPEATED,
    "final_answer_hint": ICON_HINT,
    "note": ICON_NOTE,
}

_STATUS_STYLES = {
    ExecutionStatus.FINISHED: "green",
    ExecutionStatus.REPEATED_ACTION: "yellow",
    ExecutionStatus.NOT_FINISHED: "red",
}


def generate_console_report(
    result: ExecutionResult,
    console: Console | None = None,
    verbose: bool = False,
) -> None:
    """
    Print a console report for an executor call.

    Args:
        result: The execution result to render
        console: Rich Console instance (creates one if not provided)
        verbose: Whether to show planner logs and full observations
    """
    if console is None:
        console = Console()

    _print_header(console, result)
    console.print()
    _print_timeline(console, result, verbose)
    console.print()
    _print_outputs(console, result)


def _print_header(console: Console, result: ExecutionResult) -> None:
    """Print the header panel with status and counters."""
    style = _STATUS_STYLES.get(result.status, "dim")
    header = Text()
    header.append(" Planner ", style="bold")
    header.append(result.planner_name, style="bold cyan")
    header.append(" │ ", style="dim")
    header.append(result.status.value.upper(), style=f"bold {style}")
    console.print(Panel(header, expand=False))
    console.print(
        f"  [dim]Iterations:[/dim] {result.iterations}/{result.max_iterations}"
        f"  [dim]Steps:[/dim] {len(result.steps)}"
        f"  [dim]Duration:[/dim] {result.duration_seconds * 1000:.1f}ms"
    )


def _print_timeline(console: Console, result: ExecutionResult, verbose: bool) -> None:
    """Print the ledger as a table."""
    console.print("[bold]Timeline[/bold]")
    console.print()

    if not result.steps:
        console.print("  [dim]No steps recorded[/dim]")
        return

    table = Table(show_header=True, header_style="bold", show_lines=verbose, expand=True)
    table.add_column("#", style="dim", width=3, justify="right")
    table.add_column("", width=2, justify="center")
    table.add_column("Tool", style="cyan", width=15)
    table.add_column("Input", width=24, overflow="fold")
    table.add_column("Observation", overflow="fold")

    for index, step in enumerate(result.steps, start=1):
        kind = step_kind(step)
        observation = step.observation.strip()
        if not verbose:
            observation = _truncate(observation, 80)
        if verbose and step.action.log:
            observation = f"[dim]{escape(_truncate(step.action.log, 200))}[/dim]\n{escape(observation)}"
        else:
            observation = escape(observation)
        table.add_row(
            str(index),
            _KIND_ICONS[kind],
            escape(step.action.tool) or "[dim]-[/dim]",
            escape(_truncate(step.action.tool_input, 40)),
            observation,
        )

    console.print(table)


def _print_outputs(console: Console, result: ExecutionResult) -> None:
    """Print the outputs of the call, without the embedded ledger."""
    console.print("[bold]Outputs[/bold]")
    console.print()
    outputs = {k: v for k, v in result.outputs.items() if k != INTERMEDIATE_STEPS_KEY}
    if not outputs:
        console.print("  [dim](empty)[/dim]")
        return
    for key, value in outputs.items():
        console.print(f"  [dim]{escape(key)}:[/dim] {escape(str(value))}")


def _truncate(s: str, max_len: int) -> str:
    """Truncate string with ellipsis."""
    if len(s) <= max_len:
        return s
    return s[: max_len - 3] + "..."
