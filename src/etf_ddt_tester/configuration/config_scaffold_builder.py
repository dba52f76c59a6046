"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "endpoint.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Endpoint configuration for etf-ddt-tester.
# Replace every <REQUIRED> placeholder before running run or list-catalog.
# Remove <OPTIONAL> entries your setup does not need.

endpoint:
  # Base URL of the validator web application.
  url: "<REQUIRED>"
  # HTTP basic authentication, only when the validator requires it.
  username: "<OPTIONAL>"
  password: "<OPTIONAL>"
  # Upper bound for archive uploads and for waiting on one test run.
  timeout_seconds: 2700
  poll_interval_ms: 2000

suites:
  # Directory holding one sub directory per test suite (run.json, expected.json, *.zip).
  directory: "<REQUIRED>"
  # Worker threads waiting on test cases.
  parallelism: 16

output:
  directory: "build/tmp/ddt/results"
"""


def build_placeholder_configuration() -> str:
    """Build an endpoint configuration template with placeholders and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder endpoint configuration to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(
            f"Endpoint configuration file already exists: {destination.resolve()}"
        )
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
