"""Case binding tests."""

from __future__ import annotations

import threading
import time

import pytest
from etf_ddt_tester.comparison import CaseMismatchError
from etf_ddt_tester.expectation_store import WILDCARD_LABEL, ExpectedCase
from etf_ddt_tester.result_correlation import (
    CaseInterruptedError,
    MissingResultError,
    SingleResultBinding,
    WildcardBinding,
)
from etf_ddt_tester.validator_client import RemoteRunError, ResultStatus, TestAssertionResult


def _result(label: str, status: ResultStatus = ResultStatus.PASSED) -> TestAssertionResult:
    return TestAssertionResult(label=label, status=status, duration_ms=1)


def _wait_in_thread(binding, timeout: float | None = None):
    outcome: dict[str, BaseException | None] = {}

    def _consume() -> None:
        try:
            binding.wait_and_compare(timeout)
        except BaseException as exc:  # noqa: BLE001
            outcome["error"] = exc
        else:
            outcome["error"] = None

    thread = threading.Thread(target=_consume, daemon=True)
    thread.start()
    return thread, outcome


def test_single_binding_compares_attached_result() -> None:
    binding = SingleResultBinding(ExpectedCase(label="A", expected_result=ResultStatus.PASSED))
    thread, outcome = _wait_in_thread(binding)

    assert binding.attach(_result("A"))
    thread.join(timeout=5)

    assert outcome["error"] is None
    assert binding.results == (_result("A"),)


def test_single_binding_rejects_second_result() -> None:
    binding = SingleResultBinding(ExpectedCase(label="A", expected_result=ResultStatus.PASSED))

    assert binding.attach(_result("A"))
    assert not binding.attach(_result("A", ResultStatus.FAILED))
    binding.wait_and_compare()


def test_single_binding_reports_mismatch() -> None:
    binding = SingleResultBinding(ExpectedCase(label="A", expected_result=ResultStatus.PASSED))
    binding.attach(_result("A", ResultStatus.FAILED))

    with pytest.raises(CaseMismatchError):
        binding.wait_and_compare()


def test_single_binding_closed_without_result_is_missing() -> None:
    binding = SingleResultBinding(ExpectedCase(label="A", expected_result=ResultStatus.PASSED))
    thread, outcome = _wait_in_thread(binding)

    binding.close()
    thread.join(timeout=5)

    assert isinstance(outcome["error"], MissingResultError)
    assert str(outcome["error"]) == "No result found for test 'A'"
    assert binding.results == ()


def test_single_binding_result_wins_over_later_close() -> None:
    binding = SingleResultBinding(ExpectedCase(label="A", expected_result=ResultStatus.PASSED))
    binding.attach(_result("A"))
    binding.close()

    binding.wait_and_compare()


def test_single_binding_abort_raises_remote_failure() -> None:
    binding = SingleResultBinding(ExpectedCase(label="A", expected_result=ResultStatus.PASSED))
    binding.abort(RuntimeError("boom"))

    with pytest.raises(RemoteRunError, match="boom") as exc_info:
        binding.wait_and_compare()

    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_single_binding_timeout_interrupts_case() -> None:
    binding = SingleResultBinding(ExpectedCase(label="A", expected_result=ResultStatus.PASSED))

    with pytest.raises(CaseInterruptedError):
        binding.wait_and_compare(timeout=0.01)


def test_wildcard_binding_validates_each_batch_until_closed() -> None:
    binding = WildcardBinding(
        ExpectedCase(label=WILDCARD_LABEL, expected_result=ResultStatus.PASSED)
    )
    thread, outcome = _wait_in_thread(binding)

    binding.append(_result("B"))
    binding.append(_result("C"))
    time.sleep(0.05)
    assert thread.is_alive()

    binding.close()
    thread.join(timeout=5)

    assert outcome["error"] is None
    assert [result.label for result in binding.results] == ["B", "C"]


def test_wildcard_binding_fails_on_violating_result() -> None:
    binding = WildcardBinding(
        ExpectedCase(label=WILDCARD_LABEL, expected_result=ResultStatus.PASSED)
    )
    thread, outcome = _wait_in_thread(binding)

    binding.append(_result("B"))
    binding.append(_result("C", ResultStatus.FAILED))
    thread.join(timeout=5)

    assert isinstance(outcome["error"], CaseMismatchError)


def test_wildcard_binding_ignores_spurious_wakes() -> None:
    binding = WildcardBinding(
        ExpectedCase(label=WILDCARD_LABEL, expected_result=ResultStatus.PASSED)
    )
    thread, outcome = _wait_in_thread(binding)

    for _ in range(3):
        with binding._condition:
            binding._condition.notify_all()
    time.sleep(0.05)
    assert thread.is_alive()

    binding.close()
    thread.join(timeout=5)
    assert outcome["error"] is None


def test_wildcard_binding_without_results_passes() -> None:
    binding = WildcardBinding(
        ExpectedCase(label=WILDCARD_LABEL, expected_result=ResultStatus.FAILED)
    )
    binding.close()

    binding.wait_and_compare()


def test_wildcard_binding_abort_raises_remote_failure() -> None:
    binding = WildcardBinding(
        ExpectedCase(label=WILDCARD_LABEL, expected_result=ResultStatus.PASSED)
    )
    thread, outcome = _wait_in_thread(binding)

    binding.abort(RuntimeError("remote down"))
    thread.join(timeout=5)

    assert isinstance(outcome["error"], RemoteRunError)


def test_wildcard_binding_timeout_interrupts_case() -> None:
    binding = WildcardBinding(
        ExpectedCase(label=WILDCARD_LABEL, expected_result=ResultStatus.PASSED)
    )

    with pytest.raises(CaseInterruptedError):
        binding.wait_and_compare(timeout=0.01)
