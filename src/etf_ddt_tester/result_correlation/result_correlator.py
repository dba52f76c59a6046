"""Run observer routing delivered assertion results to case bindings."""

from __future__ import annotations

import logging
import threading

from etf_ddt_tester.expectation_store.expected_case_models import ExpectationStore
from etf_ddt_tester.validator_client.validator_models import TestAssertionResult, TestRunResult

from .case_bindings import CaseBinding, SingleResultBinding, WildcardBinding

logger = logging.getLogger(__name__)


class ResultCorrelator:
    """Observer of one remote test run feeding the bindings of one suite.

    The label to binding mapping is built before the run starts and is only
    read afterwards.
    """

    def __init__(self, store: ExpectationStore) -> None:
        self._named = {
            label: SingleResultBinding(expected) for label, expected in store.cases.items()
        }
        self._wildcard = WildcardBinding(store.wildcard) if store.wildcard is not None else None
        self._finished = threading.Event()
        self.remote_failure: Exception | None = None

    @property
    def bindings(self) -> tuple[CaseBinding, ...]:
        named: tuple[CaseBinding, ...] = tuple(self._named.values())
        return named + ((self._wildcard,) if self._wildcard is not None else ())

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    def result_delivered(self, result: TestAssertionResult) -> None:
        binding = self._named.get(result.label)
        if binding is not None:
            if not binding.attach(result):
                logger.warning("Ignoring repeated result for %s", result.label)
        elif self._wildcard is not None:
            self._wildcard.append(result)
        # Results without a named or wildcard case are not compared.

    def run_finished(self, run_result: TestRunResult | None = None) -> None:
        """Terminal signal; results carried by the completed run are routed first."""
        if self._finished.is_set():
            return
        if run_result is not None:
            for result in run_result:
                self.result_delivered(result)
        self._finished.set()
        for binding in self.bindings:
            binding.close()

    def exception_occurred(self, exception: Exception) -> None:
        """Terminal signal for a failed run; waiting cases raise RemoteRunError."""
        if self._finished.is_set():
            return
        logger.error("Test run failed: %s", exception)
        self.remote_failure = exception
        self._finished.set()
        for binding in self.bindings:
            binding.abort(exception)
