"""Tests for gate report artifacts."""

import json
from pathlib import Path

import pytest

from secgate.gate import classify_run, run_all
from secgate.report import REPORT_JSON, REPORT_MD, build_report_dict, write_reports
from secgate.schemas.validator import validate_data
from secgate.types import CheckKind, CheckResult, GateRunReport, Verdict


def _sample_report() -> GateRunReport:
    report = GateRunReport(project_root=Path("/srv/bundle"))
    report.extend([
        CheckResult("dockerfile_present", CheckKind.PASS, "Dockerfile found", "docker/Dockerfile"),
        CheckResult("secret_scanner", CheckKind.WARN, "trufflehog not found | skipped"),
        CheckResult("manifest_privileged", CheckKind.FAIL, "Privileged container", "k8s/x.yaml"),
    ])
    return report


def test_report_dict_is_schema_valid() -> None:
    report = _sample_report()
    data = build_report_dict(report, classify_run(report))

    assert validate_data(data, "gate_report", strict=False) == (True, [])
    assert data["verdict"] == "failure"
    assert data["exit_code"] == 1
    assert data["counts"] == {"passed": 1, "warned": 1, "failed": 1, "total": 3}
    assert data["generated_at"] == "1970-01-01T00:00:00Z"
    assert "location" not in data["results"][1]


def test_unknown_timestamp_mode_rejected() -> None:
    with pytest.raises(ValueError, match="timestamp mode"):
        build_report_dict(_sample_report(), Verdict.FAILURE, "sometimes")


def test_wallclock_timestamp_is_not_epoch() -> None:
    data = build_report_dict(_sample_report(), Verdict.FAILURE, "wallclock")
    assert data["generated_at"] != "1970-01-01T00:00:00Z"
    assert data["timestamp_mode"] == "wallclock"


def test_write_reports(tmp_path) -> None:
    report = _sample_report()
    json_path, md_path = write_reports(report, Verdict.FAILURE, tmp_path / "out")

    assert json_path == tmp_path / "out" / REPORT_JSON
    assert md_path == tmp_path / "out" / REPORT_MD

    data = json.loads(json_path.read_text(encoding="utf-8"))
    assert [r["check_id"] for r in data["results"]] == [r.check_id for r in report.results]

    md = md_path.read_text(encoding="utf-8")
    assert "# Security Gate Report" in md
    assert "FAILURE" in md
    assert "- Failed: 1" in md
    assert "trufflehog not found \\| skipped" in md
    assert "1 (gate failed)" in md


def test_deterministic_reports_are_byte_identical(clean_project, no_tools, tmp_path) -> None:
    outputs = []
    for name in ("a", "b"):
        report = run_all(clean_project, tools=no_tools)
        json_path, md_path = write_reports(report, classify_run(report), tmp_path / name)
        outputs.append((json_path.read_bytes(), md_path.read_bytes()))
    assert outputs[0] == outputs[1]


def test_malformed_report_is_not_written(tmp_path) -> None:
    report = _sample_report()
    report.passed = -1
    with pytest.raises(ValueError, match="Schema validation failed"):
        write_reports(report, Verdict.FAILURE, tmp_path / "out")
    assert not (tmp_path / "out").exists()
