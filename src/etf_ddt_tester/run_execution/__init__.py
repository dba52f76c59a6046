"""Run execution domain exports."""

from .conformance_run_use_case import RunExecutionError, execute_conformance_run, run_suites
from .run_contracts import RunOutcome, RunRequest

__all__ = [
    "RunRequest",
    "RunOutcome",
    "RunExecutionError",
    "execute_conformance_run",
    "run_suites",
]
