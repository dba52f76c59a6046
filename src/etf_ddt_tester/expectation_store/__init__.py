"""Expectation store exports."""

from .expectation_reader import ExpectationFileError, parse_expected_case, read_expectations
from .expected_case_models import WILDCARD_LABEL, ExpectationStore, ExpectedCase

__all__ = [
    "WILDCARD_LABEL",
    "ExpectationFileError",
    "ExpectationStore",
    "ExpectedCase",
    "parse_expected_case",
    "read_expectations",
]
