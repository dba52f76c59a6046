"""Result correlation exports."""

from .case_bindings import (
    CaseBinding,
    CaseInterruptedError,
    MissingResultError,
    SingleResultBinding,
    WildcardBinding,
)
from .result_correlator import ResultCorrelator

__all__ = [
    "CaseBinding",
    "CaseInterruptedError",
    "MissingResultError",
    "ResultCorrelator",
    "SingleResultBinding",
    "WildcardBinding",
]
