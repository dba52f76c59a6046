"""Results workbook writer service."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .report_models import CaseOutcome, CaseVerdict, RunMetadata

RESULTS_SHEET_NAME = "Results"
RUN_INFO_SHEET_NAME = "RunInfo"
RESULT_COLUMNS: tuple[str, ...] = ("Suite", "Test Case", "Verdict", "Details")
_COLUMN_WIDTHS = (30, 50, 14, 80)


def write_results_workbook(
    output_path: Path | str,
    outcomes: Sequence[CaseOutcome],
    run_metadata: RunMetadata,
) -> None:
    """Write one row per case outcome plus a RunInfo sheet with totals."""
    workbook = Workbook()
    sheet = workbook.active
    if sheet is None:
        raise RuntimeError("Workbook active sheet is not available.")
    assert isinstance(sheet, Worksheet)
    sheet.title = RESULTS_SHEET_NAME

    _write_header(sheet)
    ordered = sorted(outcomes, key=lambda outcome: (outcome.suite, outcome.case))
    for row_number, outcome in enumerate(ordered, start=2):
        sheet.cell(row=row_number, column=1, value=outcome.suite)
        sheet.cell(row=row_number, column=2, value=outcome.case)
        sheet.cell(row=row_number, column=3, value=outcome.verdict.value)
        details = sheet.cell(row=row_number, column=4, value=outcome.details or None)
        details.alignment = Alignment(wrap_text=True, vertical="top")
    sheet.freeze_panes = "A2"

    _write_run_info_sheet(workbook, run_metadata, outcomes)

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(output)


def _write_header(sheet: Worksheet) -> None:
    for column_index, (name, width) in enumerate(zip(RESULT_COLUMNS, _COLUMN_WIDTHS), start=1):
        sheet.cell(row=1, column=column_index, value=name)
        sheet.cell(row=1, column=column_index).style = "Headline 3"
        sheet.column_dimensions[get_column_letter(column_index)].width = width


def _write_run_info_sheet(
    workbook: Workbook, run_metadata: RunMetadata, outcomes: Sequence[CaseOutcome]
) -> None:
    sheet = workbook.create_sheet(RUN_INFO_SHEET_NAME)
    counts = Counter(outcome.verdict for outcome in outcomes)
    entries = (
        ("run_start", run_metadata.run_start.isoformat()),
        ("endpoint", run_metadata.endpoint_url),
        ("session_id", run_metadata.session_id),
        ("suites_directory", str(run_metadata.suites_directory)),
        ("output_path", str(run_metadata.output_path)),
        ("suites", len({outcome.suite for outcome in outcomes})),
        ("total", len(outcomes)),
        *((verdict.value.lower(), counts.get(verdict, 0)) for verdict in CaseVerdict),
    )
    for row, (key, value) in enumerate(entries, start=1):
        sheet.cell(row=row, column=1, value=key)
        sheet.cell(row=row, column=2, value=value)
