"""
Reporting module for safe-gh.

Output formats:
    - JSON: One document per command on stdout (decisions, dry-runs,
      errors, success payloads)
    - Console: Rich tables for `config show` and `doctor`

Example:
    from safegh.report import render_outcome

    print(render_outcome(engine.run(request)))
"""

from safegh.report.console import DoctorCheck, print_config, print_doctor
from safegh.report.json import (
    decision_payload,
    dry_run_payload,
    error_payload,
    render_outcome,
    success_payload,
)

__all__ = [
    "DoctorCheck",
    "decision_payload",
    "dry_run_payload",
    "error_payload",
    "print_config",
    "print_doctor",
    "render_outcome",
    "success_payload",
]
