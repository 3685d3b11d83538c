"""Gate evaluator: run the catalog, fold results, classify the run."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from rich.console import Console

from secgate.catalog import CATALOG, GROUP_TITLES
from secgate.checks.base import CheckContext, CheckSpec
from secgate.config import GateConfig
from secgate.tools import ToolRunner
from secgate.types import CheckKind, CheckResult, GateRunReport, ProjectRootError, Verdict
from secgate.ui import render_group, render_result

logger = logging.getLogger(__name__)


def validate_project_root(project_root: Path) -> Path:
    """Resolve the project root or raise ProjectRootError."""
    root = Path(project_root)
    if not root.exists():
        raise ProjectRootError(f"Project root does not exist: {root}")
    if not root.is_dir():
        raise ProjectRootError(f"Project root is not a directory: {root}")
    try:
        next(root.iterdir(), None)
    except OSError as e:
        raise ProjectRootError(f"Project root is not readable: {root}: {e}") from e
    return root.resolve()


def run_check(spec: CheckSpec, ctx: CheckContext) -> list[CheckResult]:
    """Run one check; an internal error becomes a FAIL for that check only."""
    try:
        return list(spec.run(ctx, spec))
    except Exception as e:
        logger.exception("check %s crashed", spec.check_id)
        return [CheckResult(spec.check_id, CheckKind.FAIL, f"{spec.title} could not run: {e}")]


def run_all(
    project_root: Path,
    config: GateConfig | None = None,
    tools: ToolRunner | None = None,
    console: Console | None = None,
    catalog: Sequence[CheckSpec] = CATALOG,
) -> GateRunReport:
    """Run every catalog check once, in order, against ``project_root``.

    Args:
        project_root: Directory holding the deployment bundle
        config: Gate configuration (defaults if None)
        tools: Advisory tool runner (timeout taken from config if None)
        console: Where progress lines go; silent if None
        catalog: Checks to run

    Returns:
        GateRunReport with counters and every result in emission order

    Raises:
        ProjectRootError: If the project root is missing or unreadable
    """
    root = validate_project_root(project_root)
    config = config or GateConfig()
    tools = tools or ToolRunner(timeout=config.tool_timeout)
    ctx = CheckContext(project_root=root, config=config, tools=tools)
    report = GateRunReport(project_root=root)

    current_group = None
    for spec in catalog:
        if console is not None and spec.group != current_group:
            if current_group is not None:
                console.print()
            render_group(console, GROUP_TITLES.get(spec.group, spec.group))
            current_group = spec.group
        logger.debug("running check %s", spec.check_id)
        for result in run_check(spec, ctx):
            report.record(result)
            if console is not None:
                render_result(console, result, report)

    return report


def classify_run(report: GateRunReport) -> Verdict:
    if report.failed > 0:
        return Verdict.FAILURE
    if report.warned > 0:
        return Verdict.SUCCESS_WITH_WARNINGS
    return Verdict.SUCCESS
