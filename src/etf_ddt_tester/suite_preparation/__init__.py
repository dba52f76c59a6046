"""Suite preparation exports."""

from .prepared_test_suite import (
    EXPECTED_FILENAME,
    RUN_FILENAME,
    PreparedTestSuite,
    SuitePreparationError,
    prepare_test_suite,
)

__all__ = [
    "EXPECTED_FILENAME",
    "RUN_FILENAME",
    "PreparedTestSuite",
    "SuitePreparationError",
    "prepare_test_suite",
]
