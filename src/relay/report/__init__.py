"""
Reporting module for Relay.

Generates human-readable and machine-readable reports of executor calls.

Output formats:
    - Console: Rich terminal output with a step timeline and status
    - JSON: Structured output for programmatic consumption

Example:
    from relay.report import generate_console_report, generate_json_report

    result = executor.execute({"input": "..."})
    generate_console_report(result)
    print(generate_json_report(result))
"""

from relay.report.console import generate_console_report
from relay.report.json import build_report_dict, generate_json_report, step_kind

__all__ = [
    "build_report_dict",
    "generate_console_report",
    "generate_json_report",
    "step_kind",
]
