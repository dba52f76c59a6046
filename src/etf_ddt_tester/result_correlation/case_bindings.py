"""Case bindings pairing expected cases with asynchronously delivered results.

A binding is written by the thread delivering run callbacks and read by the
worker thread waiting on its test case. Named cases use a single-assignment
future; the wildcard case accumulates results behind a condition variable.
The terminal signal completes every binding, so waiting consumers always
return once the run has finished.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, InvalidStateError

from etf_ddt_tester.comparison.case_comparator import compare_result
from etf_ddt_tester.expectation_store.expected_case_models import ExpectedCase
from etf_ddt_tester.validator_client.endpoint_protocols import RemoteRunError
from etf_ddt_tester.validator_client.validator_models import TestAssertionResult

logger = logging.getLogger(__name__)


class MissingResultError(AssertionError):
    """The run finished without delivering a result for a named case."""


class CaseInterruptedError(AssertionError):
    """Waiting for a case result was interrupted before the run finished."""


def _remote_failure(label: str, exception: Exception) -> RemoteRunError:
    failure = RemoteRunError(f"Test run failed before a result for '{label}' arrived: {exception}")
    failure.__cause__ = exception
    return failure


class SingleResultBinding:
    """Binding of a named case expecting exactly one delivered result."""

    def __init__(self, expected: ExpectedCase) -> None:
        self.expected = expected
        self._future: Future[TestAssertionResult | None] = Future()

    @property
    def label(self) -> str:
        return self.expected.label

    @property
    def results(self) -> tuple[TestAssertionResult, ...]:
        """Results attached so far."""
        if not self._future.done() or self._future.exception() is not None:
            return ()
        result = self._future.result()
        return (result,) if result is not None else ()

    def attach(self, result: TestAssertionResult) -> bool:
        """Attach the delivered result; returns False when the binding is already complete."""
        try:
            self._future.set_result(result)
        except InvalidStateError:
            return False
        return True

    def close(self) -> None:
        """Terminal signal: release the waiter even without a result."""
        try:
            self._future.set_result(None)
        except InvalidStateError:
            pass

    def abort(self, exception: Exception) -> None:
        try:
            self._future.set_exception(_remote_failure(self.label, exception))
        except InvalidStateError:
            pass

    def wait_for_result(self, timeout: float | None = None) -> TestAssertionResult:
        """Block until the result arrived or the run finished."""
        try:
            result = self._future.result(timeout=timeout)
        except TimeoutError as exc:
            raise CaseInterruptedError(
                f"Test interrupted while waiting for '{self.label}'"
            ) from exc
        if result is None:
            raise MissingResultError(f"No result found for test '{self.label}'")
        return result

    def wait_and_compare(self, timeout: float | None = None) -> None:
        compare_result(self.expected, self.wait_for_result(timeout))


class WildcardBinding:
    """Binding of the wildcard case collecting every result without a named case."""

    def __init__(self, expected: ExpectedCase) -> None:
        self.expected = expected
        self._results: list[TestAssertionResult] = []
        self._condition = threading.Condition()
        self._closed = False
        self._failure: Exception | None = None

    @property
    def label(self) -> str:
        return self.expected.label

    @property
    def results(self) -> tuple[TestAssertionResult, ...]:
        with self._condition:
            return tuple(self._results)

    def append(self, result: TestAssertionResult) -> None:
        with self._condition:
            self._results.append(result)
            self._condition.notify_all()

    def close(self) -> None:
        with self._condition:
            self._closed = True
            self._condition.notify_all()

    def abort(self, exception: Exception) -> None:
        with self._condition:
            self._failure = _remote_failure(self.label, exception)
            self._closed = True
            self._condition.notify_all()

    def wait_and_compare(self, timeout: float | None = None) -> None:
        """Re-validate all accumulated results on every new batch until the run finished.

        Wakes that bring no new result are ignored; only the terminal signal ends the wait.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        known = 0
        while True:
            with self._condition:
                released = self._condition.wait_for(
                    lambda: len(self._results) > known or self._closed,
                    timeout=None if deadline is None else max(0.0, deadline - time.monotonic()),
                )
                if not released:
                    raise CaseInterruptedError(
                        f"Test interrupted while waiting for '{self.label}' results"
                    )
                if self._failure is not None:
                    raise self._failure
                snapshot = tuple(self._results)
                finished = self._closed
            if len(snapshot) > known:
                for result in snapshot:
                    compare_result(self.expected, result)
                known = len(snapshot)
            if finished:
                if not snapshot:
                    logger.info("No unlisted results were delivered for the wildcard case")
                return


CaseBinding = SingleResultBinding | WildcardBinding
