"""Comparison of delivered assertion results against expected cases."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from etf_ddt_tester.expectation_store.expected_case_models import ExpectedCase
from etf_ddt_tester.validator_client.validator_models import TestAssertionResult

from .message_normalization import normalize_message

logger = logging.getLogger(__name__)


class CaseMismatchError(AssertionError):
    """A delivered result violates its expected case."""

    def __init__(
        self,
        label: str,
        violations: Iterable[str],
        *,
        missing_messages: Iterable[str] = (),
        unexpected_messages: Iterable[str] = (),
    ) -> None:
        self.label = label
        self.violations = tuple(violations)
        self.missing_messages = tuple(sorted(missing_messages))
        self.unexpected_messages = tuple(sorted(unexpected_messages))
        super().__init__(f"{label}: " + " ".join(self.violations))


def compare_result(expected: ExpectedCase, result: TestAssertionResult) -> None:
    """Raise CaseMismatchError when the delivered result violates the expected case.

    Status, duration and message count are checked in that order and the first
    violation fails immediately. Message sets are compared both ways and every
    missing or unexpected message is logged before failing.
    """
    label = result.label
    if result.status != expected.expected_result:
        raise CaseMismatchError(
            label,
            [
                "The assertion result status does not match expected status: "
                f"expected {expected.expected_result.value}, actual {result.status.value}."
            ],
        )
    if expected.max_duration_ms is not None and result.duration_ms > expected.max_duration_ms:
        raise CaseMismatchError(
            label,
            [
                "The assertion execution time exceeds the maximum expected duration: "
                f"expected <= {expected.max_duration_ms} ms, actual {result.duration_ms} ms."
            ],
        )
    if (
        expected.expected_message_count is not None
        and len(result.messages) != expected.expected_message_count
    ):
        raise CaseMismatchError(
            label,
            [
                "The number of messages does not match the expected number of messages: "
                f"expected {expected.expected_message_count}, actual {len(result.messages)}."
            ],
        )
    if expected.expected_messages is not None:
        _compare_messages(label, expected.expected_messages, result.messages)


def _compare_messages(
    label: str, expected_messages: frozenset[str], messages: Iterable[str]
) -> None:
    missing = set(expected_messages)
    unexpected: set[str] = set()
    for message in messages:
        normalized = normalize_message(message)
        if normalized in missing:
            missing.remove(normalized)
        else:
            unexpected.add(normalized)

    violations = []
    for message in sorted(missing):
        logger.error("Expected message not found: %s", message)
    if missing:
        violations.append(f"{len(missing)} expected message(s) were not found.")
    for message in sorted(unexpected):
        logger.error("Message not expected: %s", message)
    if unexpected:
        violations.append(f"{len(unexpected)} message(s) were not expected.")
    if violations:
        raise CaseMismatchError(
            label, violations, missing_messages=missing, unexpected_messages=unexpected
        )
