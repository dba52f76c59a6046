"""Results writing domain exports."""

from .report_models import CaseOutcome, CaseVerdict, RunMetadata
from .run_report_writer import RESULTS_SHEET_NAME, RUN_INFO_SHEET_NAME, write_results_workbook

__all__ = [
    "CaseOutcome",
    "CaseVerdict",
    "RESULTS_SHEET_NAME",
    "RUN_INFO_SHEET_NAME",
    "RunMetadata",
    "write_results_workbook",
]
