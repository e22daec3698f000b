"""
CLI entry point for Relay.

This module provides the Typer-based command-line interface for Relay.

Commands:
    run         Run a scenario file through the executor
    doctor      Check the Python version and the Ollama backend

Architecture Note:
    The CLI is intentionally thin - it parses arguments, builds the executor
    from the scenario and delegates to relay.agent and relay.report. The
    same pieces are usable programmatically without the CLI.
"""

import json
import sys
import traceback
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape

from relay import __version__
from relay.agent.executor import ExecutionResult
from relay.callbacks import ConsoleObserver, LoggingObserver, ObserverGroup
from relay.cancellation import CancellationToken
from relay.errors import RelayError
from relay.logging import setup_logging
from relay.planner.ollama import OllamaConfig, OllamaPlanner
from relay.report import generate_console_report, generate_json_report
from relay.scenario import build_scenario_run
from relay.schema import ExecutionStatus, load_scenario

# Initialize Typer app with metadata
app = typer.Typer(
    name="relay",
    help="Drive a planner and its tools through a bounded plan/act/observe loop.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for formatted output
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]relay[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    Relay - bounded agent execution loop.

    Runs a planner against its tools, records every step, and stops on a
    final answer, a repeated action, or an exhausted iteration budget.
    """
    pass


@app.command()
def run(
    scenario_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the scenario YAML file.",
            exists=True,
            readable=True,
            resolve_path=True,
        ),
    ],
    max_iterations: Annotated[
        Optional[int],
        typer.Option(
            "--max-iterations",
            "-n",
            min=0,
            help="Override the scenario's iteration budget.",
        ),
    ] = None,
    intermediate_steps: Annotated[
        bool,
        typer.Option(
            "--intermediate-steps",
            help="Include the step ledger in the outputs.",
        ),
    ] = False,
    handle_parsing_errors: Annotated[
        bool,
        typer.Option(
            "--handle-parsing-errors",
            help="Feed unparsable planner output back as an observation instead of failing.",
        ),
    ] = False,
    continue_on_repeat: Annotated[
        bool,
        typer.Option(
            "--continue-on-repeat",
            help="On a repeated action, skip the batch and ask the planner again instead of stopping.",
        ),
    ] = False,
    timeout: Annotated[
        Optional[float],
        typer.Option(
            "--timeout",
            min=0,
            help="Cancel the run after this many seconds.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Print actions as they are dispatched and full observations.",
        ),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            help="Enable debug mode with full error tracebacks.",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results in JSON format.",
        ),
    ] = False,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Log level (DEBUG, INFO, WARNING, ERROR).",
        ),
    ] = "WARNING",
    log_file: Annotated[
        Optional[Path],
        typer.Option(
            "--log-file",
            help="Write JSON logs to this file instead of stderr.",
            resolve_path=True,
        ),
    ] = None,
) -> None:
    """
    Run a scenario through the executor.

    Loads the scenario, builds its tools and planner, runs the executor and
    prints the step timeline and outputs.

    Exit codes: 0 when the planner finished or was stopped for repeating
    itself, 1 when the iteration budget ran out or the run failed.

    Example:
        $ relay run scenarios/capital.yaml --intermediate-steps
    """
    setup_logging(level="DEBUG" if debug else log_level, log_file=log_file)

    try:
        scenario = load_scenario(scenario_path)
    except Exception as e:
        if json_output:
            _output_json_error("scenario_load_error", str(e), debug)
        else:
            console.print(f"[red]Error loading scenario: {escape(str(e))}[/red]")
            if debug:
                console.print(f"[dim]{escape(traceback.format_exc())}[/dim]")
        raise typer.Exit(code=1)

    overrides: dict[str, object] = {}
    if max_iterations is not None:
        overrides["max_iterations"] = max_iterations
    if intermediate_steps:
        overrides["return_intermediate_steps"] = True
    if handle_parsing_errors:
        overrides["handle_parsing_errors"] = True
    if continue_on_repeat:
        overrides["stop_on_repeated_action"] = False
    config = scenario.executor.model_copy(update=overrides)

    observer = LoggingObserver()
    if verbose and not json_output:
        observer = ObserverGroup(observer, ConsoleObserver(console))

    scenario_run = build_scenario_run(scenario, config=config, observer=observer)
    token = CancellationToken(timeout_seconds=timeout)
    planner = scenario_run.executor.planner

    try:
        result = scenario_run.executor.execute(scenario_run.inputs, token)
    except RelayError as e:
        if json_output:
            print(generate_json_report(None, e))
        else:
            console.print(f"[red]Run failed: {escape(str(e))}[/red]")
            if debug:
                console.print(f"[dim]{escape(traceback.format_exc())}[/dim]")
        raise typer.Exit(code=1)
    except Exception as e:
        if json_output:
            _output_json_error(type(e).__name__, str(e), debug)
        else:
            console.print(f"[red]Run failed: {type(e).__name__}: {escape(str(e))}[/red]")
            if debug:
                console.print(f"[dim]{escape(traceback.format_exc())}[/dim]")
        raise typer.Exit(code=1)
    finally:
        if isinstance(planner, OllamaPlanner):
            planner.close()

    if json_output:
        print(generate_json_report(result))
    else:
        _display_run_result(result, verbose)

    if result.status is ExecutionStatus.NOT_FINISHED:
        raise typer.Exit(code=1)


def _display_run_result(result: ExecutionResult, verbose: bool) -> None:
    """Display the run report plus a one-line verdict."""
    generate_console_report(result, console=console, verbose=verbose)
    console.print()
    if result.status is ExecutionStatus.FINISHED:
        console.print("[green]✓ Planner finished[/green]")
    elif result.status is ExecutionStatus.REPEATED_ACTION:
        console.print("[yellow]⟳ Stopped: the planner repeated an action[/yellow]")
    else:
        console.print(
            f"[red]✗ Not finished after {result.max_iterations} iteration(s)[/red]"
        )


def _output_json_error(error_type: str, message: str, include_traceback: bool = False) -> None:
    """Output an error in JSON format."""
    output = {
        "error": True,
        "error_type": error_type,
        "message": message,
    }
    if include_traceback:
        output["traceback"] = traceback.format_exc()
    print(json.dumps(output, indent=2))


@app.command()
def doctor(
    base_url: Annotated[
        str,
        typer.Option("--base-url", help="Ollama base URL."),
    ] = "http://localhost:11434",
    model: Annotated[
        str,
        typer.Option("--model", "-m", help="Model the ollama planner should use."),
    ] = "qwen2.5:0.5b",
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results in JSON format.",
        ),
    ] = False,
) -> None:
    """
    Check system environment and dependencies.

    Verifies:
    - Python version (3.11+)
    - Ollama connectivity and model availability

    Example:
        $ relay doctor --model llama3.2
    """
    checks = []

    py_version = sys.version_info
    py_ok = py_version >= (3, 11)
    checks.append({
        "name": "Python version",
        "ok": py_ok,
        "value": f"{py_version.major}.{py_version.minor}.{py_version.micro}",
        "message": "OK" if py_ok else "Requires Python 3.11+",
    })

    with OllamaPlanner(OllamaConfig(base_url=base_url, model=model, timeout_seconds=5.0)) as planner:
        ollama_ok, ollama_message = planner.check_connection()
    checks.append({
        "name": "Ollama",
        "ok": ollama_ok,
        "value": base_url,
        "message": ollama_message,
    })

    all_ok = all(check["ok"] for check in checks)

    if json_output:
        print(json.dumps({"ok": all_ok, "version": __version__, "checks": checks}, indent=2))
    else:
        console.print(f"[bold]Relay Doctor[/bold] v{__version__}")
        console.print()
        for check in checks:
            icon = "[green]✓[/green]" if check["ok"] else "[red]✗[/red]"
            console.print(f"{icon} {check['name']}: [dim]{check['value']}[/dim] - {escape(check['message'])}")

    if not all_ok:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
