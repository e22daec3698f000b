"""
Pytest configuration and fixtures for Relay tests.

This module provides shared fixtures used across unit and integration tests.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest
import structlog

from relay.logging import close_log_file
from relay.tools.simple import StaticTool


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Undo setup_logging() so later tests never log to a closed stream."""
    yield
    structlog.reset_defaults()
    close_log_file()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def search_tool() -> StaticTool:
    """A search tool that knows one fact."""
    return StaticTool(
        name="search",
        responses={"capital of France": "Paris"},
        description="Look up facts",
    )


@pytest.fixture
def finishing_scenario_yaml() -> str:
    """Scenario where the planner searches once and then answers."""
    return """
name: capital
inputs:
  input: What is the capital of France?
executor:
  max_iterations: 5
tools:
  - name: search
    description: Look up facts
    responses:
      capital of France: Paris
turns:
  - actions:
      - tool: search
        tool_input: capital of France
  - finish:
      output: Paris
"""


@pytest.fixture
def repeating_scenario_yaml() -> str:
    """Scenario where the planner asks for the same search twice."""
    return """
inputs:
  input: What is the capital of France?
tools:
  - name: search
    responses:
      capital of France: Paris
turns:
  - actions:
      - tool: search
        tool_input: capital of France
  - actions:
      - tool: search
        tool_input: capital of France
"""


@pytest.fixture
def looping_scenario_yaml() -> str:
    """Scenario whose planner never finishes within its budget."""
    return """
inputs:
  input: Count forever
executor:
  max_iterations: 3
tools:
  - name: counter
    default: "next"
turns:
  - actions:
      - tool: counter
        tool_input: "1"
  - actions:
      - tool: counter
        tool_input: "2"
  - actions:
      - tool: counter
        tool_input: "3"
  - actions:
      - tool: counter
        tool_input: "4"
"""


@pytest.fixture
def write_scenario(temp_dir: Path):
    """Return a helper that writes scenario YAML to a file and returns its path."""

    def _write(content: str, name: str = "scenario.yaml") -> Path:
        path = temp_dir / name
        path.write_text(content)
        return path

    return _write
