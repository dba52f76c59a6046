"""Suite directory preparation and test run start."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from etf_ddt_tester.expectation_store.expectation_reader import read_expectations
from etf_ddt_tester.result_correlation.case_bindings import CaseBinding
from etf_ddt_tester.result_correlation.result_correlator import ResultCorrelator
from etf_ddt_tester.run_resolution.run_resolver import load_run_specification, resolve_executable
from etf_ddt_tester.template_generation.expectation_template_writer import (
    generate_expectation_template,
)
from etf_ddt_tester.validator_client.endpoint_protocols import (
    RemoteInvocationError,
    RemoteRunError,
    ValidatorEndpoint,
)

RUN_FILENAME = "run.json"
EXPECTED_FILENAME = "expected.json"
ARCHIVE_SUFFIX = ".zip"

logger = logging.getLogger(__name__)


class SuitePreparationError(Exception):
    """Raised when a suite directory does not hold a usable suite."""


class PreparedTestSuite:
    """One suite directory: run file, optional data archive and optional expectations."""

    def __init__(
        self,
        directory: Path,
        *,
        run_file: Path,
        expected_file: Path,
        data_archive: Path | None,
    ) -> None:
        self.directory = directory
        self.run_file = run_file
        self.expected_file = expected_file
        self.data_archive = data_archive
        self.correlator: ResultCorrelator | None = None
        self.generated_cases: int | None = None

    @property
    def name(self) -> str:
        return self.directory.name

    @property
    def generates_template(self) -> bool:
        return not self.expected_file.exists()

    @property
    def remote_failure(self) -> Exception | None:
        return self.correlator.remote_failure if self.correlator is not None else None

    def create_test_run_and_cases(self, endpoint: ValidatorEndpoint) -> tuple[CaseBinding, ...]:
        """Start the suite's test run and return one binding per expected case.

        Without an expectation file the run is executed synchronously, an
        expectation file is generated from its results and no bindings are returned.
        """
        generate = self.generates_template
        store = read_expectations(self.expected_file)
        if generate:
            logger.info(
                "The %s file does not exist in %s, generating a template from the results "
                "of this run.",
                EXPECTED_FILENAME,
                self.name,
            )

        specification = load_run_specification(self.run_file)
        data_source = specification.data_source(self.data_archive)
        executable = resolve_executable(specification, endpoint)
        parameters = executable.parameters_with(specification.arguments)
        test_object = endpoint.create_test_object(data_source)

        if generate:
            test_run = endpoint.execute(executable, test_object, parameters)
            try:
                run_result = test_run.result()
            except (RemoteRunError, RemoteInvocationError) as exc:
                logger.error("Can not generate a template from a failed test run: %s", exc)
                raise
            self.generated_cases = generate_expectation_template(run_result, self.expected_file)
            return ()

        correlator = ResultCorrelator(store)
        self.correlator = correlator
        endpoint.execute(executable, test_object, parameters, observer=correlator)
        return correlator.bindings


def prepare_test_suite(directory: Path | str) -> PreparedTestSuite:
    """Validate the suite directory layout and return the prepared suite."""
    path = Path(directory)
    if not path.is_dir() or not os.access(path, os.R_OK | os.X_OK):
        raise SuitePreparationError(f"Suite directory is not readable: {path}")

    archives = sorted(
        candidate
        for candidate in path.iterdir()
        if candidate.is_file() and candidate.suffix.lower() == ARCHIVE_SUFFIX
    )
    if len(archives) > 1:
        raise SuitePreparationError(
            f"Only one ZIP file is supported. Multiple ZIP files found in directory "
            f"{path.resolve()}"
        )
    data_archive = archives[0] if archives else None
    if data_archive is not None:
        _expect_readable_file(data_archive)

    run_file = path / RUN_FILENAME
    _expect_readable_file(run_file)
    expected_file = path / EXPECTED_FILENAME
    if expected_file.exists():
        _expect_readable_file(expected_file)

    return PreparedTestSuite(
        path,
        run_file=run_file,
        expected_file=expected_file,
        data_archive=data_archive,
    )


def _expect_readable_file(path: Path) -> None:
    if not path.is_file():
        raise SuitePreparationError(f"Required file not found: {path}")
    if not os.access(path, os.R_OK):
        raise SuitePreparationError(f"File is not readable: {path}")
