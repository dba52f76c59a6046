"""Generation of expectation files from the results of one test run."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import TracebackType
from typing import Any, TextIO

from etf_ddt_tester.validator_client.validator_models import TestAssertionResult

GENERATED_DESCRIPTION = "Generated from Test Run"

logger = logging.getLogger(__name__)


class ExpectationTemplateWriter:
    """Streams expected cases into one JSON object, one record per call."""

    def __init__(self, handle: TextIO) -> None:
        self._handle = handle
        self._labels: set[str] = set()

    def __enter__(self) -> ExpectationTemplateWriter:
        self._handle.write("{")
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self._handle.write("\n}\n" if self._labels else "}\n")

    @property
    def written(self) -> int:
        return len(self._labels)

    def write_case(self, label: str, details: Mapping[str, Any]) -> bool:
        """Append one record; returns False for a label that was already written."""
        if label in self._labels:
            logger.warning("Skipping repeated assertion %s in generated expectations", label)
            return False
        if self._labels:
            self._handle.write(",")
        self._handle.write("\n ")
        self._handle.write(json.dumps(label, ensure_ascii=False))
        self._handle.write(": ")
        self._handle.write(json.dumps(details, ensure_ascii=False))
        self._labels.add(label)
        return True


def expected_case_details(result: TestAssertionResult) -> dict[str, Any]:
    """Expected case object reproducing the delivered result."""
    details: dict[str, Any] = {"expectedResult": result.status.value}
    if result.messages:
        details["expectedMessages"] = list(result.messages)
    else:
        details["expectedMessageCount"] = 0
    details["description"] = GENERATED_DESCRIPTION
    return details


def generate_expectation_template(
    results: Iterable[TestAssertionResult], output_path: Path | str
) -> int:
    """Write an expectation file covering every result; returns the number of cases written."""
    path = Path(output_path)
    with path.open("w", encoding="utf-8") as handle, ExpectationTemplateWriter(handle) as writer:
        for result in results:
            writer.write_case(result.label, expected_case_details(result))
    logger.info("Generated %d expected case(s) in %s", writer.written, path)
    return writer.written
