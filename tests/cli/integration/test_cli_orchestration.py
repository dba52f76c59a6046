"""CLI orchestration integration tests."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner
from openpyxl import load_workbook
from etf_ddt_tester.cli import cli, main
from etf_ddt_tester.configuration import load_configuration
from etf_ddt_tester.results_writing import RESULTS_SHEET_NAME
from etf_ddt_tester.validator_client import ResultStatus, TestAssertionResult


def _write_config(tmp_path: Path) -> Path:
    (tmp_path / "ddt").mkdir()
    path = tmp_path / "endpoint.yaml"
    path.write_text(
        "endpoint:\n"
        "  url: https://validator.example.com/etf-webapp\n"
        "suites:\n"
        "  directory: ddt\n",
        encoding="utf-8",
    )
    return path


def _write_suite(tmp_path: Path, expected: object) -> None:
    directory = tmp_path / "ddt" / "suite-a"
    directory.mkdir()
    (directory / "run.json").write_text(
        json.dumps({"executableTestSuiteName": "Suite one", "endpoint": "https://svc/wfs"}),
        encoding="utf-8",
    )
    (directory / "expected.json").write_text(json.dumps(expected), encoding="utf-8")


def _install_endpoint(monkeypatch, endpoint) -> None:
    monkeypatch.setattr("etf_ddt_tester.cli.HttpValidatorClient", lambda _settings: endpoint)


def test_generate_config_command_writes_loadable_scaffold(tmp_path: Path) -> None:
    runner = CliRunner()
    output_path = tmp_path / "endpoint.yaml"

    result = runner.invoke(cli, ["generate-config", "--output", str(output_path)])

    assert result.exit_code == 0
    assert str(output_path.resolve()) in result.output
    text = output_path.read_text(encoding="utf-8")
    (tmp_path / "ddt").mkdir()
    output_path.write_text(
        text.replace('url: "<REQUIRED>"', 'url: "http://localhost:8080/etf-webapp"')
        .replace('directory: "<REQUIRED>"', 'directory: "ddt"')
        .replace('username: "<OPTIONAL>"', 'username: "etf"')
        .replace('password: "<OPTIONAL>"', 'password: "etf"'),
        encoding="utf-8",
    )
    assert load_configuration(output_path).endpoint.username == "etf"


def test_run_command_writes_results_and_succeeds(
    tmp_path: Path, monkeypatch, make_endpoint, make_catalog_item
) -> None:
    config_path = _write_config(tmp_path)
    _write_suite(tmp_path, {"A": {"expectedResult": "PASSED", "maxDurationMs": 100}})
    endpoint = make_endpoint(
        suites=[make_catalog_item("EID1", "Suite one")],
        results=[TestAssertionResult("A", ResultStatus.PASSED, 20)],
    )
    _install_endpoint(monkeypatch, endpoint)
    output_dir = tmp_path / "results"

    runner = CliRunner()
    result = runner.invoke(
        cli, ["run", "--config", str(config_path), "--output-dir", str(output_dir)]
    )

    assert result.exit_code == 0, result.output
    result_files = list(output_dir.glob("ddt-results-*.xlsx"))
    assert len(result_files) == 1
    assert str(result_files[0]) in result.output
    rows = list(load_workbook(result_files[0])[RESULTS_SHEET_NAME].iter_rows(values_only=True))
    assert rows[1][:3] == ("suite-a", "A", "PASSED")


def test_run_command_exits_with_one_when_a_case_fails(
    tmp_path: Path, monkeypatch, capsys, make_endpoint, make_catalog_item
) -> None:
    config_path = _write_config(tmp_path)
    _write_suite(tmp_path, {"A": {"expectedResult": "PASSED", "maxDurationMs": 10}})
    endpoint = make_endpoint(
        suites=[make_catalog_item("EID1", "Suite one")],
        results=[TestAssertionResult("A", ResultStatus.PASSED, 20)],
    )
    _install_endpoint(monkeypatch, endpoint)

    exit_code = main(
        ["run", "--config", str(config_path), "--output-dir", str(tmp_path / "results")]
    )
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "1 of 1 test case(s) failed" in captured.err
    assert "ddt-results-" in captured.out


def test_list_catalog_prints_all_catalogs(
    tmp_path: Path, monkeypatch, make_endpoint, make_catalog_item
) -> None:
    config_path = _write_config(tmp_path)
    endpoint = make_endpoint(
        templates=[make_catalog_item("T1", "Template one")],
        suites=[make_catalog_item("EID1", "Suite one")],
        tags=[make_catalog_item("TAG1", "INSPIRE")],
    )

    class _ClosingEndpoint:
        def __init__(self, _settings) -> None:
            pass

        def __enter__(self):
            return endpoint

        def __exit__(self, *exc_info) -> None:
            endpoint.close()

    monkeypatch.setattr("etf_ddt_tester.cli.HttpValidatorClient", _ClosingEndpoint)

    runner = CliRunner()
    result = runner.invoke(cli, ["list-catalog", "--config", str(config_path)])

    assert result.exit_code == 0, result.output
    assert "Available Test Run Templates:" in result.output
    assert " - Template one (T1)" in result.output
    assert " - Suite one (EID1)" in result.output
    assert "Available Tags:" in result.output
    assert " - INSPIRE (TAG1)" in result.output
    assert endpoint.closed
