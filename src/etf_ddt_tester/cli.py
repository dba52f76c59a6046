"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys

import click

from etf_ddt_tester.configuration import (
    DEFAULT_CONFIG_FILENAME,
    ConfigurationError,
    load_configuration,
    write_placeholder_configuration,
)
from etf_ddt_tester.run_execution import RunExecutionError, RunRequest, execute_conformance_run
from etf_ddt_tester.validator_client import Catalog, HttpValidatorClient, RemoteInvocationError

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class CliError(Exception):
    """Custom CLI error."""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="etf-ddt-tester")
@click.option(
    "--log-level",
    default="INFO",
    show_default=True,
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    help="Log level of the run output",
)
def cli(log_level: str) -> None:
    """Data-driven conformance tester for ETF validators."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s",
    )


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML endpoint configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder YAML endpoint configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="run")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to YAML/JSON endpoint configuration file",
)
@click.option(
    "--output-dir",
    "output_dir",
    required=False,
    type=click.Path(path_type=str),
    help="Optional directory for storing the results workbook",
)
@click.option(
    "--suite",
    "suite_names",
    multiple=True,
    help="Only run the named suite directory (repeatable)",
)
@click.option(
    "--case-timeout",
    "case_timeout",
    required=False,
    type=click.FloatRange(min=0, min_open=True),
    help="Seconds to wait for the results of a single test case",
)
def run_tests(
    config_path: str,
    output_dir: str | None,
    suite_names: tuple[str, ...],
    case_timeout: float | None,
) -> None:
    """Execute every test suite below the configured suites directory."""
    try:
        outcome = execute_conformance_run(
            RunRequest(
                config_path=config_path,
                output_dir=output_dir,
                suite_names=suite_names,
                case_timeout_seconds=case_timeout,
            ),
            endpoint_factory=HttpValidatorClient,
        )
    except (RunExecutionError, RemoteInvocationError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(outcome.output_path))
    if outcome.failed:
        raise CliError(f"{outcome.failed} of {len(outcome.outcomes)} test case(s) failed")


@cli.command(name="list-catalog")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to YAML/JSON endpoint configuration file",
)
def list_catalog(config_path: str) -> None:
    """List the test run templates, executable test suites and tags of the validator."""
    try:
        configuration = load_configuration(config_path)
        with HttpValidatorClient(configuration.endpoint) as client:
            catalogs = (client.test_run_templates(), client.executable_test_suites(), client.tags())
    except (ConfigurationError, RemoteInvocationError) as exc:
        raise CliError(str(exc)) from exc
    for catalog in catalogs:
        _echo_catalog(catalog)


def _echo_catalog(catalog: Catalog) -> None:
    click.echo(f"Available {catalog.kind}s:")
    for item in catalog:
        click.echo(f" - {item}")


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
