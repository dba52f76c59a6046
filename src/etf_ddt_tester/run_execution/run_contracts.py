"""Run execution entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from etf_ddt_tester.results_writing.report_models import CaseOutcome, CaseVerdict


@dataclass(frozen=True)
class RunRequest:
    """Input contract for executing one run over the configured suites."""

    config_path: str
    output_dir: str | None = None
    suite_names: tuple[str, ...] = ()
    case_timeout_seconds: float | None = None


@dataclass(frozen=True)
class RunOutcome:
    """Output contract for one completed run."""

    output_path: Path
    outcomes: tuple[CaseOutcome, ...]

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.is_failure)

    @property
    def passed(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.verdict == CaseVerdict.PASSED)

    @property
    def generated(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.verdict == CaseVerdict.GENERATED)
