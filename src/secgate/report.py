"""Gate report artifacts: SECURITY_GATE_REPORT.json and .md."""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import TextIO

from secgate.schemas.validator import validate_data
from secgate.types import CheckKind, GateRunReport, Verdict

REPORT_JSON = "SECURITY_GATE_REPORT.json"
REPORT_MD = "SECURITY_GATE_REPORT.md"
TIMESTAMP_MODES = ("deterministic", "wallclock")


def _get_timestamp(timestamp_mode: str) -> str:
    if timestamp_mode == "deterministic":
        return "1970-01-01T00:00:00Z"
    return datetime.now(UTC).isoformat()


def build_report_dict(report: GateRunReport, verdict: Verdict, timestamp_mode: str = "deterministic") -> dict:
    """Serializable form of a run, matching the gate_report schema."""
    if timestamp_mode not in TIMESTAMP_MODES:
        raise ValueError(f"Unknown timestamp mode: {timestamp_mode!r}")
    return {
        "schema_version": "1.0",
        "generated_at": _get_timestamp(timestamp_mode),
        "timestamp_mode": timestamp_mode,
        "project_root": str(report.project_root),
        "verdict": verdict.value,
        "exit_code": verdict.exit_code,
        "counts": {
            "passed": report.passed,
            "warned": report.warned,
            "failed": report.failed,
            "total": report.total,
        },
        "results": [r.to_dict() for r in report.results],
    }


def write_reports(
    report: GateRunReport,
    verdict: Verdict,
    out_dir: Path,
    timestamp_mode: str = "deterministic",
) -> tuple[Path, Path]:
    """Write JSON and Markdown reports into ``out_dir``.

    The JSON payload is validated against the bundled schema first, so a
    malformed report is never written.

    Returns:
        (json_path, md_path)
    """
    data = build_report_dict(report, verdict, timestamp_mode)
    validate_data(data, "gate_report", strict=True)

    out_dir.mkdir(parents=True, exist_ok=True)

    json_path = out_dir / REPORT_JSON
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, sort_keys=True)

    md_path = out_dir / REPORT_MD
    with open(md_path, "w", encoding="utf-8") as f:
        _write_markdown_report(f, data)

    return json_path, md_path


def _write_markdown_report(f: TextIO, data: dict) -> None:
    """Write human-readable markdown report."""
    f.write("# Security Gate Report\n\n")

    status_emoji = {"success": "✅", "success_with_warnings": "⚠️", "failure": "❌"}[data["verdict"]]
    f.write(f"**Verdict**: {status_emoji} {data['verdict'].upper()}\n\n")
    f.write(f"**Project**: `{data['project_root']}`\n\n")
    f.write(f"**Generated**: {data['generated_at']} ({data['timestamp_mode']})\n\n")

    counts = data["counts"]
    f.write("## Summary\n\n")
    f.write(f"- Passed: {counts['passed']}\n")
    f.write(f"- Warnings: {counts['warned']}\n")
    f.write(f"- Failed: {counts['failed']}\n\n")

    f.write("## Results\n\n")
    f.write("| Check | Status | Message |\n")
    f.write("|---|---|---|\n")
    symbols = {CheckKind.PASS.value: "✅", CheckKind.WARN.value: "⚠️", CheckKind.FAIL.value: "❌"}
    for item in data["results"]:
        message = item["message"].replace("|", "\\|")
        f.write(f"| {item['check_id']} | {symbols[item['kind']]} | {message} |\n")
    f.write("\n")

    f.write("## Exit Code\n\n")
    if data["exit_code"] == 0:
        f.write("0 (success - gate passed)\n")
    else:
        f.write("1 (gate failed)\n")
