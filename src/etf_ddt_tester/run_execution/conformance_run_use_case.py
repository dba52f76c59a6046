"""Run execution use-case service."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from etf_ddt_tester.comparison.case_comparator import CaseMismatchError
from etf_ddt_tester.configuration import ConfigurationError, EndpointSettings, load_configuration
from etf_ddt_tester.expectation_store.expectation_reader import ExpectationFileError
from etf_ddt_tester.result_correlation.case_bindings import (
    CaseBinding,
    CaseInterruptedError,
    MissingResultError,
)
from etf_ddt_tester.results_writing import (
    CaseOutcome,
    CaseVerdict,
    RunMetadata,
    write_results_workbook,
)
from etf_ddt_tester.run_resolution.run_specification import RunSpecificationError
from etf_ddt_tester.suite_preparation import (
    EXPECTED_FILENAME,
    PreparedTestSuite,
    SuitePreparationError,
    prepare_test_suite,
)
from etf_ddt_tester.validator_client import (
    HttpValidatorClient,
    RemoteInvocationError,
    RemoteRunError,
    ValidatorEndpoint,
)

from .run_contracts import RunOutcome, RunRequest

logger = logging.getLogger(__name__)

EndpointFactory = Callable[[EndpointSettings], ValidatorEndpoint]


class RunExecutionError(Exception):
    """Raised when a run use case cannot be completed."""


@dataclass(frozen=True)
class _StartedSuite:
    """Suite whose remote run was started, with the bindings to wait on."""

    suite: PreparedTestSuite
    bindings: tuple[CaseBinding, ...]


def execute_conformance_run(
    request: RunRequest,
    *,
    endpoint_factory: EndpointFactory | None = None,
) -> RunOutcome:
    """Run every configured suite against the validator and write the results workbook."""
    try:
        configuration = load_configuration(request.config_path)
    except ConfigurationError as exc:
        raise RunExecutionError(str(exc)) from exc

    factory = endpoint_factory or HttpValidatorClient
    endpoint = factory(configuration.endpoint)
    try:
        if not endpoint.available():
            raise RunExecutionError(
                f"Validator endpoint is not available: {configuration.endpoint.url}"
            )
        logger.info("Test session id: %s", endpoint.session_id)

        run_start = datetime.now(UTC)
        suite_directories = _discover_suite_directories(
            configuration.suites.directory, request.suite_names
        )
        outcomes = run_suites(
            suite_directories,
            endpoint,
            parallelism=configuration.suites.parallelism,
            case_timeout=request.case_timeout_seconds,
        )
    finally:
        endpoint.close()

    output_path = _resolve_output_path(request.output_dir, configuration.output.directory)
    logger.info("Output directory is: %s", output_path.parent)
    write_results_workbook(
        output_path,
        outcomes,
        RunMetadata(
            run_start=run_start,
            endpoint_url=configuration.endpoint.url,
            suites_directory=configuration.suites.directory,
            output_path=output_path.resolve(),
            session_id=endpoint.session_id,
        ),
    )
    return RunOutcome(output_path=output_path.resolve(), outcomes=tuple(outcomes))


def run_suites(
    suite_directories: Sequence[Path],
    endpoint: ValidatorEndpoint,
    *,
    parallelism: int,
    case_timeout: float | None = None,
) -> list[CaseOutcome]:
    """Start one remote run per suite, then wait on all cases with parallel workers."""
    outcomes: list[CaseOutcome] = []
    started: list[_StartedSuite] = []
    for directory in suite_directories:
        suite_outcome, started_suite = _start_suite(directory, endpoint)
        if suite_outcome is not None:
            outcomes.append(suite_outcome)
        if started_suite is not None:
            started.append(started_suite)

    case_count = sum(len(item.bindings) for item in started)
    if not case_count:
        return outcomes

    max_workers = max(1, min(parallelism, case_count))
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ddt-case") as executor:
        futures: list[tuple[_StartedSuite, list[Future[CaseOutcome]]]] = [
            (
                item,
                [
                    executor.submit(_run_case, item.suite.name, binding, endpoint, case_timeout)
                    for binding in item.bindings
                ],
            )
            for item in started
        ]
        for item, case_futures in futures:
            case_outcomes = [future.result() for future in case_futures]
            outcomes.extend(_suite_outcomes(item.suite, case_outcomes))
    return outcomes


def _start_suite(
    directory: Path, endpoint: ValidatorEndpoint
) -> tuple[CaseOutcome | None, _StartedSuite | None]:
    name = directory.name
    try:
        suite = prepare_test_suite(directory)
        bindings = suite.create_test_run_and_cases(endpoint)
    except (
        SuitePreparationError,
        RunSpecificationError,
        ExpectationFileError,
        ValueError,
        OSError,
    ) as exc:
        logger.error("Failed to create Test Suite %s: %s", name, exc)
        return _suite_error(name, f"Failed to create Test Suite: {exc}"), None
    except (RemoteInvocationError, RemoteRunError) as exc:
        logger.error("Failed to start Test Suite %s: %s", name, exc)
        return _suite_error(name, f"Failed to start Test Suite: {exc}"), None

    if suite.generated_cases is not None:
        return (
            CaseOutcome(
                suite=name,
                case=EXPECTED_FILENAME,
                verdict=CaseVerdict.GENERATED,
                details=(
                    f"{suite.generated_cases} expected case(s) written to {suite.expected_file}"
                ),
            ),
            None,
        )
    logger.info("Started Test Suite %s with %d test case(s)", name, len(bindings))
    return None, _StartedSuite(suite=suite, bindings=bindings)


def _run_case(
    suite_name: str, binding: CaseBinding, endpoint: ValidatorEndpoint, timeout: float | None
) -> CaseOutcome:
    if not endpoint.available():
        return CaseOutcome(suite_name, binding.label, CaseVerdict.ERROR, "Endpoint down")
    try:
        binding.wait_and_compare(timeout)
    except CaseMismatchError as exc:
        outcome = CaseOutcome(suite_name, binding.label, CaseVerdict.FAILED, _mismatch_details(exc))
    except MissingResultError as exc:
        outcome = CaseOutcome(suite_name, binding.label, CaseVerdict.MISSING, str(exc))
    except CaseInterruptedError as exc:
        outcome = CaseOutcome(suite_name, binding.label, CaseVerdict.FAILED, str(exc))
    except RemoteRunError as exc:
        outcome = CaseOutcome(suite_name, binding.label, CaseVerdict.ERROR, str(exc))
    else:
        outcome = CaseOutcome(suite_name, binding.label, CaseVerdict.PASSED)
    if not endpoint.available():
        return CaseOutcome(suite_name, binding.label, CaseVerdict.ERROR, "Endpoint down")
    return outcome


def _suite_outcomes(
    suite: PreparedTestSuite, case_outcomes: Sequence[CaseOutcome]
) -> list[CaseOutcome]:
    failure = suite.remote_failure
    if failure is not None:
        return [_suite_error(suite.name, f"Test run failed: {failure}")]
    return list(case_outcomes)


def _suite_error(name: str, details: str) -> CaseOutcome:
    return CaseOutcome(suite=name, case=name, verdict=CaseVerdict.ERROR, details=details)


def _mismatch_details(error: CaseMismatchError) -> str:
    lines = list(error.violations)
    lines.extend(f"missing: {message}" for message in error.missing_messages)
    lines.extend(f"unexpected: {message}" for message in error.unexpected_messages)
    return "\n".join(lines)


def _discover_suite_directories(root: Path, suite_names: Sequence[str]) -> list[Path]:
    directories = sorted(path for path in root.iterdir() if path.is_dir())
    if not suite_names:
        return directories
    by_name = {path.name: path for path in directories}
    unknown = [name for name in suite_names if name not in by_name]
    if unknown:
        raise RunExecutionError(f"Unknown suite(s) in {root}: {', '.join(unknown)}")
    return [by_name[name] for name in suite_names]


def _resolve_output_path(output_dir: str | None, default_directory: Path) -> Path:
    destination = Path(output_dir) if output_dir else default_directory
    timestamp = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    return destination / f"ddt-results-{timestamp}.xlsx"
