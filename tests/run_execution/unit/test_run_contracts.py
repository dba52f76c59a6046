"""Tests for run execution domain entities."""

from __future__ import annotations

from pathlib import Path

from etf_ddt_tester.results_writing import CaseOutcome, CaseVerdict
from etf_ddt_tester.run_execution.run_contracts import RunOutcome, RunRequest


def test_run_request_defaults_to_all_suites_without_case_timeout() -> None:
    request = RunRequest(config_path="endpoint.yaml")

    assert request.output_dir is None
    assert request.suite_names == ()
    assert request.case_timeout_seconds is None


def test_run_outcome_counts_verdicts() -> None:
    outcome = RunOutcome(
        output_path=Path("/tmp/ddt-results.xlsx"),
        outcomes=(
            CaseOutcome("s", "A", CaseVerdict.PASSED),
            CaseOutcome("s", "B", CaseVerdict.FAILED),
            CaseOutcome("s", "C", CaseVerdict.MISSING),
            CaseOutcome("t", "expected.json", CaseVerdict.GENERATED),
        ),
    )

    assert outcome.output_path.name == "ddt-results.xlsx"
    assert outcome.passed == 1
    assert outcome.failed == 2
    assert outcome.generated == 1
