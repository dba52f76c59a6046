"""Results writing entities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path


class CaseVerdict(str, Enum):
    """Rendered outcome of one test case."""

    PASSED = "PASSED"
    FAILED = "FAILED"
    MISSING = "MISSING"
    ERROR = "ERROR"
    GENERATED = "GENERATED"


@dataclass(frozen=True)
class CaseOutcome:
    """Outcome of one test case, or of a whole suite for suite-level errors."""

    suite: str
    case: str
    verdict: CaseVerdict
    details: str = ""

    @property
    def is_failure(self) -> bool:
        return self.verdict in {CaseVerdict.FAILED, CaseVerdict.MISSING, CaseVerdict.ERROR}


@dataclass(frozen=True)
class RunMetadata:
    """Metadata rendered into the RunInfo sheet."""

    run_start: datetime
    endpoint_url: str
    suites_directory: Path
    output_path: Path
    session_id: str
