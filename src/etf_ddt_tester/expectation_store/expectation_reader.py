"""Reader for suite expectation files."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from etf_ddt_tester.comparison.message_normalization import normalize_message
from etf_ddt_tester.validator_client.validator_models import ResultStatus

from .expected_case_models import WILDCARD_LABEL, ExpectationStore, ExpectedCase


class ExpectationFileError(Exception):
    """Raised when an expectation file is malformed."""


def read_expectations(expected_path: Path | str) -> ExpectationStore:
    """Parse the expectation file; an absent file yields an empty store."""
    path = Path(expected_path)
    if not path.exists():
        return ExpectationStore()
    try:
        parsed = json.loads(
            path.read_text(encoding="utf-8"), object_pairs_hook=_reject_duplicate_labels
        )
    except json.JSONDecodeError as exc:
        raise ExpectationFileError(f"Failed to parse expectation file {path}: {exc}") from exc
    if not isinstance(parsed, Mapping):
        raise ExpectationFileError(f"Expectation file root must be an object: {path}")

    cases: dict[str, ExpectedCase] = {}
    wildcard: ExpectedCase | None = None
    for label, definition in parsed.items():
        case = parse_expected_case(label, definition)
        if label == WILDCARD_LABEL:
            wildcard = case
        else:
            cases[label] = case
    return ExpectationStore(cases=cases, wildcard=wildcard)


def parse_expected_case(label: str, definition: Any) -> ExpectedCase:
    """Build one expected case from its JSON object."""
    if not isinstance(definition, Mapping):
        raise ExpectationFileError(f"Expected case '{label}' must be an object.")
    raw_status = definition.get("expectedResult")
    if not isinstance(raw_status, str):
        raise ExpectationFileError(f"Expected case '{label}' requires an expectedResult string.")
    try:
        expected_result = ResultStatus.from_string(raw_status)
    except ValueError as exc:
        raise ExpectationFileError(f"Expected case '{label}': {exc}") from exc

    description = definition.get("description")
    if description is not None and not isinstance(description, str):
        raise ExpectationFileError(f"Expected case '{label}': description must be a string.")

    return ExpectedCase(
        label=label,
        expected_result=expected_result,
        description=description,
        max_duration_ms=_optional_non_negative_int(definition, "maxDurationMs", label),
        expected_messages=_optional_messages(definition, label),
        expected_message_count=_optional_non_negative_int(
            definition, "expectedMessageCount", label
        ),
    )


def _optional_messages(definition: Mapping[str, Any], label: str) -> frozenset[str] | None:
    if "expectedMessages" not in definition:
        return None
    raw_messages = definition["expectedMessages"]
    if not isinstance(raw_messages, list) or not all(
        isinstance(message, str) for message in raw_messages
    ):
        raise ExpectationFileError(
            f"Expected case '{label}': expectedMessages must be a list of strings."
        )
    return frozenset(normalize_message(message) for message in raw_messages)


def _optional_non_negative_int(
    definition: Mapping[str, Any], key: str, label: str
) -> int | None:
    if key not in definition:
        return None
    value = definition[key]
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ExpectationFileError(
            f"Expected case '{label}': {key} must be a non-negative integer."
        )
    return value


def _reject_duplicate_labels(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise ExpectationFileError(f"Duplicate key in expectation file: {key}")
        result[key] = value
    return result
