"""
Integration tests for the command-line interface.

Tests:
    - relay --version
    - relay run: exit codes, console and JSON output, option overrides
    - relay doctor with a mocked Ollama check
"""

import json
from unittest.mock import patch

from typer.testing import CliRunner

from relay import __version__
from relay.cli import app
from relay.planner.ollama import OllamaPlanner

runner = CliRunner()


class TestVersion:
    """Tests for --version."""

    def test_version(self):
        """Version is printed and the command exits cleanly."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestRun:
    """Tests for relay run."""

    def test_finishing_scenario(self, finishing_scenario_yaml, write_scenario):
        """A finished call exits 0 and shows the answer."""
        path = write_scenario(finishing_scenario_yaml)
        result = runner.invoke(app, ["run", str(path)])
        assert result.exit_code == 0
        assert "Planner finished" in result.stdout
        assert "Paris" in result.stdout

    def test_finishing_scenario_json(self, finishing_scenario_yaml, write_scenario):
        """JSON output is a full report."""
        path = write_scenario(finishing_scenario_yaml)
        result = runner.invoke(app, ["run", str(path), "--json"])
        assert result.exit_code == 0
        report = json.loads(result.stdout)
        assert report["status"] == "finished"
        assert report["outputs"] == {"output": "Paris"}
        assert report["steps"][0]["tool"] == "search"

    def test_repeated_action_exits_zero(self, repeating_scenario_yaml, write_scenario):
        """A repeated-action stop is not a failure."""
        path = write_scenario(repeating_scenario_yaml)
        result = runner.invoke(app, ["run", str(path)])
        assert result.exit_code == 0
        assert "repeated an action" in result.stdout

    def test_continue_on_repeat(self, repeating_scenario_yaml, write_scenario):
        """With --continue-on-repeat the exhausted script becomes a failure."""
        path = write_scenario(repeating_scenario_yaml)
        result = runner.invoke(app, ["run", str(path), "--continue-on-repeat"])
        assert result.exit_code == 1
        assert "Run failed" in result.stdout

    def test_not_finished_exits_one(self, looping_scenario_yaml, write_scenario):
        """Budget exhaustion exits 1."""
        path = write_scenario(looping_scenario_yaml)
        result = runner.invoke(app, ["run", str(path), "--json", "--log-level", "ERROR"])
        assert result.exit_code == 1
        report = json.loads(result.stdout)
        assert report["status"] == "not_finished"
        assert report["iterations"] == 3

    def test_max_iterations_override(self, looping_scenario_yaml, write_scenario):
        """--max-iterations replaces the scenario's budget."""
        path = write_scenario(looping_scenario_yaml)
        result = runner.invoke(
            app,
            ["run", str(path), "--json", "--max-iterations", "1", "--log-level", "ERROR"],
        )
        report = json.loads(result.stdout)
        assert report["max_iterations"] == 1
        assert len(report["steps"]) == 1

    def test_handle_parsing_errors_flag(self, write_scenario):
        """--handle-parsing-errors recovers scripted garbage."""
        path = write_scenario(
            "inputs:\n  input: q\nturns:\n  - parse_error: nonsense\n  - finish:\n      output: ok\n"
        )

        failed = runner.invoke(app, ["run", str(path)])
        recovered = runner.invoke(app, ["run", str(path), "--handle-parsing-errors"])

        assert failed.exit_code == 1
        assert recovered.exit_code == 0

    def test_failing_tool_json_error(self, write_scenario):
        """Fatal errors are reported as an error report."""
        path = write_scenario(
            "inputs:\n  input: q\ntools:\n  - name: search\n    fail: true\n"
            "turns:\n  - actions:\n      - tool: search\n        tool_input: x\n"
        )
        result = runner.invoke(app, ["run", str(path), "--json", "--log-level", "CRITICAL"])
        assert result.exit_code == 1
        report = json.loads(result.stdout)
        assert report["status"] == "error"
        assert report["error"]["error_type"] == "ToolExecutionError"

    def test_invalid_scenario(self, write_scenario):
        """Scenario validation errors exit 1."""
        path = write_scenario("executor:\n  max_iterations: -1\n")
        result = runner.invoke(app, ["run", str(path)])
        assert result.exit_code == 1
        assert "Error loading scenario" in result.stdout

    def test_invalid_scenario_json(self, write_scenario):
        """Scenario errors are JSON in --json mode."""
        path = write_scenario("turns: [unclosed\n")
        result = runner.invoke(app, ["run", str(path), "--json"])
        assert result.exit_code == 1
        assert json.loads(result.stdout)["error_type"] == "scenario_load_error"

    def test_missing_file(self, temp_dir):
        """Typer rejects a path that does not exist."""
        result = runner.invoke(app, ["run", str(temp_dir / "missing.yaml")])
        assert result.exit_code == 2

    def test_verbose_prints_actions(self, finishing_scenario_yaml, write_scenario):
        """--verbose shows actions as they are dispatched."""
        path = write_scenario(finishing_scenario_yaml)
        result = runner.invoke(app, ["run", str(path), "--verbose"])
        assert result.exit_code == 0
        assert "→" in result.stdout
        assert "capital of France" in result.stdout

    def test_log_file(self, finishing_scenario_yaml, write_scenario, temp_dir):
        """--log-file writes JSON logs."""
        path = write_scenario(finishing_scenario_yaml)
        log_file = temp_dir / "relay.log"
        result = runner.invoke(
            app,
            ["run", str(path), "--log-level", "INFO", "--log-file", str(log_file)],
        )
        assert result.exit_code == 0
        events = [json.loads(line)["event"] for line in log_file.read_text().splitlines()]
        assert "Executor call started" in events
        assert "Executor call ended" in events

    def test_expired_timeout(self, finishing_scenario_yaml, write_scenario):
        """A zero timeout cancels before planning."""
        path = write_scenario(finishing_scenario_yaml)
        result = runner.invoke(app, ["run", str(path), "--timeout", "0"])
        assert result.exit_code == 1
        assert "cancelled" in result.stdout


class TestDoctor:
    """Tests for relay doctor."""

    @patch.object(OllamaPlanner, "check_connection", return_value=(True, "Connected"))
    def test_doctor_ok(self, mock_check):
        """All checks passing exits 0."""
        result = runner.invoke(app, ["doctor"])
        assert result.exit_code == 0
        assert "Ollama" in result.stdout
        mock_check.assert_called_once()

    @patch.object(
        OllamaPlanner,
        "check_connection",
        return_value=(False, "Cannot connect to Ollama"),
    )
    def test_doctor_failure_json(self, mock_check):
        """A failed check exits 1 and is reported in JSON."""
        result = runner.invoke(app, ["doctor", "--json", "--model", "llama3.2"])
        assert result.exit_code == 1
        report = json.loads(result.stdout)
        assert report["ok"] is False
        ollama = next(check for check in report["checks"] if check["name"] == "Ollama")
        assert ollama["message"] == "Cannot connect to Ollama"
