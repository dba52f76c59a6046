"""Run specification reader tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from etf_ddt_tester.run_resolution import (
    RunSpecificationError,
    load_run_specification,
)
from etf_ddt_tester.validator_client import DataSourceKind


def _write_run(tmp_path: Path, payload: object) -> Path:
    path = tmp_path / "run.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_reads_resolution_properties_and_stringifies_arguments(tmp_path: Path) -> None:
    path = _write_run(
        tmp_path,
        {
            "executableTestSuiteIds": ["EID1", "EID2"],
            "tagName": "INSPIRE",
            "arguments": {"strict": True, "limit": 5, "ratio": 0.5, "name": "x", "list": [1]},
            "url": "https://data.example.com/dataset.gml",
        },
    )

    specification = load_run_specification(path)

    assert specification.properties == {
        "executableTestSuiteIds": ("EID1", "EID2"),
        "tagName": ("INSPIRE",),
    }
    assert specification.arguments == {
        "strict": "true",
        "limit": "5",
        "ratio": "0.5",
        "name": "x",
        "list": "[1]",
    }
    assert specification.dataset_url == "https://data.example.com/dataset.gml"
    assert specification.service_url is None
    assert specification.source_path == path


def test_arguments_default_to_none(tmp_path: Path) -> None:
    specification = load_run_specification(_write_run(tmp_path, {"testRunTemplateId": "T1"}))

    assert specification.arguments is None


def test_unknown_properties_are_ignored_with_warning(tmp_path: Path, caplog) -> None:
    specification = load_run_specification(
        _write_run(tmp_path, {"testRunTemplateId": "T1", "comment": "ignored"})
    )

    assert "comment" not in specification.properties
    assert "Ignoring unknown property comment" in caplog.text


def test_archive_wins_over_service_and_dataset_urls(tmp_path: Path) -> None:
    specification = load_run_specification(
        _write_run(
            tmp_path,
            {
                "testRunTemplateId": "T1",
                "endpoint": "https://service.example.com/wfs",
                "url": "https://data.example.com/x.gml",
            },
        )
    )
    archive = tmp_path / "data.zip"

    assert specification.data_source(archive).kind == DataSourceKind.ARCHIVE
    assert specification.data_source(archive).location == str(archive)
    service = specification.data_source(None)
    assert service.kind == DataSourceKind.SERVICE
    assert service.location == "https://service.example.com/wfs"


def test_missing_data_source_is_an_error(tmp_path: Path) -> None:
    specification = load_run_specification(_write_run(tmp_path, {"testRunTemplateId": "T1"}))

    with pytest.raises(RunSpecificationError, match="endpoint or url"):
        specification.data_source(None)


@pytest.mark.parametrize(
    "payload",
    [
        {"testRunTemplateId": ""},
        {"executableTestSuiteIds": []},
        {"executableTestSuiteIds": "EID1"},
        {"testRunTemplateId": "T1", "arguments": ["a"]},
        ["not", "an", "object"],
    ],
)
def test_rejects_malformed_run_files(tmp_path: Path, payload: object) -> None:
    with pytest.raises(RunSpecificationError):
        load_run_specification(_write_run(tmp_path, payload))


def test_missing_run_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(RunSpecificationError, match="Run file not found"):
        load_run_specification(tmp_path / "run.json")
