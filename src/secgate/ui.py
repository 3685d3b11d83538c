"""Console rendering for gate progress and summary (cosmetic only)."""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from secgate.types import CheckKind, CheckResult, GateRunReport, Verdict

STATUS_LABELS: dict[CheckKind, tuple[str, str]] = {
    CheckKind.PASS: ("[PASS]", "bold green"),
    CheckKind.WARN: ("[WARN]", "bold yellow"),
    CheckKind.FAIL: ("[FAIL]", "bold red"),
}

VERDICT_LINES: dict[Verdict, tuple[str, str]] = {
    Verdict.SUCCESS: ("✅ Security gate PASSED - All checks successful!", "bold green"),
    Verdict.SUCCESS_WITH_WARNINGS: (
        "⚠️ Security gate PASSED with warnings - {warned} warnings found",
        "bold yellow",
    ),
    Verdict.FAILURE: ("❌ Security gate FAILED - {failed} critical issues found", "bold red"),
}


def color_enabled() -> bool:
    return os.getenv("SECGATE_COLOR", "1") == "1"


def make_console() -> Console:
    if color_enabled():
        return Console(highlight=False)
    return Console(highlight=False, no_color=True)


def configure_logging(verbose: bool, console: Console) -> None:
    """Route library logging through rich; quiet unless verbose."""
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger("secgate")
    logger.handlers.clear()
    logger.addHandler(RichHandler(console=console, show_path=False, rich_tracebacks=False))
    logger.setLevel(level)
    logger.propagate = False


def render_header(console: Console, project_root: str) -> None:
    console.print(Text("🔒 Security and Quality Gate Analysis", style="bold"))
    console.print("=====================================")
    console.print(f"Project: {project_root}")
    console.print()


def render_group(console: Console, title: str) -> None:
    console.print(Text(f"[INFO] {title}...", style="bold blue"))


def render_result(console: Console, result: CheckResult, report: GateRunReport) -> None:
    label, style = STATUS_LABELS[result.kind]
    line = Text()
    line.append(label, style=style)
    line.append(f" {result.message}")
    line.append(f"  ({report.passed}✓ {report.warned}! {report.failed}✗)", style="dim")
    console.print(line)


def render_summary(console: Console, report: GateRunReport, verdict: Verdict) -> None:
    console.print()
    console.print("==================================")
    console.print(Text("🏁 Security Gate Summary", style="bold"))
    console.print("==================================")
    console.print(Text(f"Checks Passed: {report.passed}", style="green"))
    console.print(Text(f"Warnings: {report.warned}", style="yellow"))
    console.print(Text(f"Checks Failed: {report.failed}", style="red"))
    console.print()
    template, style = VERDICT_LINES[verdict]
    console.print(Text(template.format(warned=report.warned, failed=report.failed), style=style))
    if verdict is Verdict.SUCCESS_WITH_WARNINGS:
        console.print("Consider addressing warnings before production deployment")
