"""Protocols implemented by validator endpoints and test run observers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from .validator_models import (
    Catalog,
    DataSource,
    TestAssertionResult,
    TestObjectReference,
    TestRunExecutable,
    TestRunResult,
)


class RemoteInvocationError(Exception):
    """Raised when the validator cannot be reached or rejects a request."""


class RemoteRunError(Exception):
    """Raised when a remote test run fails as a whole."""


class TestRunObserver(Protocol):
    """Callbacks invoked by an endpoint while a test run executes."""

    def result_delivered(self, result: TestAssertionResult) -> None: ...

    def run_finished(self, run_result: TestRunResult | None = None) -> None: ...

    def exception_occurred(self, exception: Exception) -> None: ...


class TestRun(Protocol):
    """Handle of a started remote test run."""

    run_id: str

    def result(self) -> TestRunResult: ...


class ValidatorEndpoint(Protocol):
    """Remote validator operations consumed by the suite harness."""

    session_id: str

    def available(self) -> bool: ...

    def test_run_templates(self) -> Catalog: ...

    def executable_test_suites(self) -> Catalog: ...

    def tags(self) -> Catalog: ...

    def create_test_object(self, data_source: DataSource) -> TestObjectReference: ...

    def execute(
        self,
        executable: TestRunExecutable,
        test_object: TestObjectReference,
        parameters: Mapping[str, str] | None,
        observer: TestRunObserver | None = None,
    ) -> TestRun: ...

    def close(self) -> None: ...
