"""Validator client exports."""

from .endpoint_protocols import (
    RemoteInvocationError,
    RemoteRunError,
    TestRun,
    TestRunObserver,
    ValidatorEndpoint,
)
from .http_validator_client import HttpTestRun, HttpValidatorClient, parse_test_run_result
from .validator_models import (
    Catalog,
    CatalogItem,
    DataSource,
    DataSourceKind,
    ExecutableKind,
    ItemNotFoundError,
    ResultStatus,
    TestAssertionResult,
    TestObjectReference,
    TestRunExecutable,
    TestRunResult,
)

__all__ = [
    "Catalog",
    "CatalogItem",
    "DataSource",
    "DataSourceKind",
    "ExecutableKind",
    "HttpTestRun",
    "HttpValidatorClient",
    "ItemNotFoundError",
    "RemoteInvocationError",
    "RemoteRunError",
    "ResultStatus",
    "TestAssertionResult",
    "TestObjectReference",
    "TestRun",
    "TestRunExecutable",
    "TestRunObserver",
    "TestRunResult",
    "ValidatorEndpoint",
    "parse_test_run_result",
]
