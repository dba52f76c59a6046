"""Tests for repository toolchain baseline configuration."""

from __future__ import annotations

import tomllib
from pathlib import Path


def _project_root() -> Path:
    return Path(__file__).resolve().parents[3]


def _pyproject() -> dict:
    return tomllib.loads((_project_root() / "pyproject.toml").read_text(encoding="utf-8"))


def test_project_uses_python_311_baseline_in_pyproject() -> None:
    pyproject = _pyproject()

    assert pyproject["project"]["requires-python"] == ">=3.11"
    assert pyproject["tool"]["ruff"]["target-version"] == "py311"
    assert pyproject["tool"]["mypy"]["python_version"] == "3.11"


def test_project_uses_uv_style_metadata_without_poetry() -> None:
    pyproject = _pyproject()

    assert "pytest" in " ".join(pyproject["dependency-groups"]["dev"])
    assert "poetry" not in pyproject["tool"]
    assert pyproject["build-system"]["build-backend"] == "hatchling.build"


def test_console_script_points_at_cli_main() -> None:
    scripts = _pyproject()["project"]["scripts"]

    assert scripts["etf-ddt-tester"] == "etf_ddt_tester.cli:main"


def test_runtime_dependencies_cover_imported_libraries() -> None:
    dependencies = " ".join(_pyproject()["project"]["dependencies"])

    for name in ("click", "httpx", "openpyxl", "pyyaml"):
        assert name in dependencies
