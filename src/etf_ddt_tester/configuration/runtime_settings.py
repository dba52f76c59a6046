"""Configuration domain entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class EndpointSettings:
    """Remote validator connectivity configuration."""

    url: str
    username: str | None
    password: str | None
    timeout_seconds: int
    poll_interval_ms: int


@dataclass(frozen=True)
class SuiteSettings:
    """Location and execution settings for suite directories."""

    directory: Path
    parallelism: int


@dataclass(frozen=True)
class OutputSettings:
    """Destination for results workbooks."""

    directory: Path


@dataclass(frozen=True)
class Configuration:
    """Top-level configuration aggregate."""

    path: Path
    endpoint: EndpointSettings
    suites: SuiteSettings
    output: OutputSettings
