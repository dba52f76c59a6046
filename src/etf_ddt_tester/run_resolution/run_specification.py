"""Run specification entity and reader."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from etf_ddt_tester.validator_client.validator_models import DataSource

logger = logging.getLogger(__name__)


class RunSpecificationError(Exception):
    """Raised when a run specification is missing, malformed or unresolvable."""


@dataclass(frozen=True)
class RunSpecification:
    """Declarative description of one remote test run."""

    source_path: Path
    properties: Mapping[str, tuple[str, ...]]
    arguments: Mapping[str, str] | None = None
    service_url: str | None = None
    dataset_url: str | None = None

    def data_source(self, archive: Path | None) -> DataSource:
        """Pick the data source; a suite archive wins over service and dataset URLs."""
        if archive is not None:
            return DataSource.archive(archive)
        if self.service_url is not None:
            return DataSource.service(self.service_url)
        if self.dataset_url is not None:
            return DataSource.dataset(self.dataset_url)
        raise RunSpecificationError(
            f"{self.source_path}: property endpoint or url is required "
            "when the suite directory contains no data archive."
        )


def read_run_specification(
    run_path: Path | str,
    *,
    single_valued: Iterable[str],
    multi_valued: Iterable[str],
) -> RunSpecification:
    """Parse a run file, keeping only the resolution properties it recognizes."""
    path = Path(run_path)
    try:
        parsed = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise RunSpecificationError(f"Run file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise RunSpecificationError(f"Failed to parse run file {path}: {exc}") from exc
    if not isinstance(parsed, Mapping):
        raise RunSpecificationError(f"Run file root must be an object: {path}")

    single_keys = set(single_valued)
    multi_keys = set(multi_valued)
    properties: dict[str, tuple[str, ...]] = {}
    for key, value in parsed.items():
        if key in single_keys:
            properties[key] = (_require_non_empty_string(value, key, path),)
        elif key in multi_keys:
            properties[key] = _require_string_list(value, key, path)
        elif key not in {"arguments", "endpoint", "url"}:
            logger.warning("Ignoring unknown property %s in %s", key, path.name)

    return RunSpecification(
        source_path=path,
        properties=properties,
        arguments=_parse_arguments(parsed.get("arguments"), path),
        service_url=_optional_url(parsed.get("endpoint"), "endpoint", path),
        dataset_url=_optional_url(parsed.get("url"), "url", path),
    )


def _parse_arguments(value: Any, path: Path) -> dict[str, str] | None:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise RunSpecificationError(f"{path}: arguments must be an object.")
    return {str(key): _stringify_argument(item) for key, item in value.items()}


def _stringify_argument(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return str(value)
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _optional_url(value: Any, key: str, path: Path) -> str | None:
    if value is None:
        return None
    return _require_non_empty_string(value, key, path)


def _require_non_empty_string(value: Any, key: str, path: Path) -> str:
    if not isinstance(value, str) or not value.strip():
        raise RunSpecificationError(f"{path}: {key} must be a non-empty string.")
    return value.strip()


def _require_string_list(value: Any, key: str, path: Path) -> tuple[str, ...]:
    if not isinstance(value, list) or not value:
        raise RunSpecificationError(f"{path}: {key} must be a non-empty list of strings.")
    return tuple(_require_non_empty_string(item, key, path) for item in value)
