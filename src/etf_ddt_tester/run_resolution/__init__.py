"""Run resolution exports."""

from .run_resolver import (
    RESOLUTION_STRATEGIES,
    ResolutionNotFoundError,
    ResolutionStrategy,
    load_run_specification,
    log_available_items,
    resolve_executable,
)
from .run_specification import RunSpecification, RunSpecificationError, read_run_specification

__all__ = [
    "RESOLUTION_STRATEGIES",
    "ResolutionNotFoundError",
    "ResolutionStrategy",
    "RunSpecification",
    "RunSpecificationError",
    "load_run_specification",
    "log_available_items",
    "read_run_specification",
    "resolve_executable",
]
