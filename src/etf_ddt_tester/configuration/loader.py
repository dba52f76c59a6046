"""Configuration loader service."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml

from .runtime_settings import Configuration, EndpointSettings, OutputSettings, SuiteSettings

DEFAULT_TIMEOUT_SECONDS = 45 * 60
DEFAULT_POLL_INTERVAL_MS = 2000
DEFAULT_PARALLELISM = 16
DEFAULT_OUTPUT_DIRECTORY = "build/tmp/ddt/results"


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def load_configuration(config_path: Path | str) -> Configuration:
    """Load and validate the configuration file."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:  # pragma: no cover - exercised indirectly
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    base_path = path.resolve().parent
    endpoint = _parse_endpoint_section(parsed.get("endpoint"))
    suites = _parse_suites_section(parsed.get("suites"), base_path)
    output = _parse_output_section(parsed.get("output"), base_path)

    return Configuration(path=path, endpoint=endpoint, suites=suites, output=output)


def _parse_endpoint_section(value: Any) -> EndpointSettings:
    section = _require_mapping(value, "endpoint")
    url = _require_non_empty_string(section.get("url"), "endpoint.url")
    parsed_url = urlparse(url)
    if parsed_url.scheme not in {"http", "https"} or not parsed_url.netloc:
        raise ConfigurationError(f"endpoint.url must be an http(s) URL: {url}")
    username = _optional_string(section.get("username"), "endpoint.username")
    password = _optional_string(section.get("password"), "endpoint.password")
    if password and not username:
        raise ConfigurationError("endpoint.password requires endpoint.username.")
    timeout_seconds = _require_positive_int(
        section.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS), "endpoint.timeout_seconds"
    )
    poll_interval_ms = _require_positive_int(
        section.get("poll_interval_ms", DEFAULT_POLL_INTERVAL_MS), "endpoint.poll_interval_ms"
    )
    return EndpointSettings(
        url=url.rstrip("/"),
        username=username,
        password=password,
        timeout_seconds=timeout_seconds,
        poll_interval_ms=poll_interval_ms,
    )


def _parse_suites_section(value: Any, base_path: Path) -> SuiteSettings:
    section = _require_mapping(value, "suites")
    directory = _resolve_path(
        base_path, _require_non_empty_string(section.get("directory"), "suites.directory")
    )
    if not directory.is_dir():
        raise ConfigurationError(f"Suites directory not found: {directory}")
    parallelism = _require_positive_int(
        section.get("parallelism", DEFAULT_PARALLELISM), "suites.parallelism"
    )
    return SuiteSettings(directory=directory, parallelism=parallelism)


def _parse_output_section(value: Any, base_path: Path) -> OutputSettings:
    section = value if value is not None else {}
    if not isinstance(section, Mapping):
        raise ConfigurationError("Configuration section 'output' must be a mapping.")
    raw_directory = section.get("directory", DEFAULT_OUTPUT_DIRECTORY)
    directory = _resolve_path(
        base_path, _require_non_empty_string(raw_directory, "output.directory")
    )
    return OutputSettings(directory=directory)


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return (base_path / candidate).resolve()
    return candidate


def _require_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' is required.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None


def _require_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return value
