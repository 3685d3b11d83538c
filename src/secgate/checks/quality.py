"""Code quality checks: application syntax, YAML syntax, CI workflows."""

from __future__ import annotations

import logging

import yaml

from secgate.checks.base import CheckContext, CheckSpec, iter_files, matches_any, read_text
from secgate.tools import ToolUnavailable
from secgate.types import CheckResult

logger = logging.getLogger(__name__)

YAML_EXTENSIONS = (".yaml", ".yml")


def check_source_syntax(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    syntax = ctx.config.syntax
    if not ctx.tools.is_available(syntax.tool):
        return [spec.skipped(f"{syntax.tool} not found - source syntax validation skipped")]

    source_root = ctx.project_root / syntax.source_dir
    files = list(iter_files(source_root, syntax.extensions, excluded_dirs=ctx.config.excluded_dirs))
    results = []
    for path in files:
        outcome = ctx.tools.try_run(syntax.tool, [*syntax.args, str(path)], cwd=ctx.project_root)
        if isinstance(outcome, ToolUnavailable):
            results.append(spec.skipped(f"{syntax.tool} became unavailable - source syntax validation stopped"))
            break
        if outcome.timed_out:
            results.append(spec.skipped(f"{syntax.tool} {outcome.output} on {ctx.rel(path)}"))
        elif not outcome.success:
            results.append(spec.violated(f"Syntax error in {ctx.rel(path)}", ctx.rel(path)))

    if not results:
        results.append(spec.passed(f"All {len(files)} source file(s) under {syntax.source_dir} have valid syntax"))
    return results


def _yaml_error_line(exc: Exception) -> str:
    mark = getattr(exc, "problem_mark", None)
    if mark is not None:
        return f" (line {mark.line + 1})"
    # Bad implicit scalars (e.g. an impossible date) surface as ValueError.
    if not isinstance(exc, yaml.YAMLError):
        return f" ({exc})"
    return ""


def check_yaml_syntax(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    results = []
    checked = 0
    for path in iter_files(ctx.project_root, YAML_EXTENSIONS, excluded_dirs=ctx.config.excluded_dirs):
        rel = ctx.rel(path)
        if matches_any(rel, ctx.config.yaml_exclude):
            logger.debug("yaml check skipping excluded %s", rel)
            continue
        text = read_text(path)
        if text is None:
            continue
        checked += 1
        try:
            for _ in yaml.safe_load_all(text):
                pass
        except (yaml.YAMLError, ValueError) as exc:
            results.append(spec.violated(f"YAML syntax error in {rel}{_yaml_error_line(exc)}", rel))

    if not results:
        results.append(spec.passed(f"All {checked} YAML file(s) have valid syntax"))
    return results


def check_workflow_structure(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    workflows_dir = ctx.project_root / ctx.config.workflows_dir
    workflows = list(iter_files(workflows_dir, YAML_EXTENSIONS))
    if not workflows:
        return [spec.passed(f"No CI workflows found under {ctx.config.workflows_dir}")]

    results = []
    for path in workflows:
        rel = ctx.rel(path)
        text = read_text(path)
        if text is None:
            continue
        try:
            doc = yaml.safe_load(text)
        except (yaml.YAMLError, ValueError):
            # Reported by the YAML syntax check.
            continue
        if not isinstance(doc, dict):
            results.append(spec.violated(f"Workflow {rel} is not a mapping", rel))
            continue
        missing = []
        if "name" not in doc:
            missing.append("name")
        # YAML 1.1 reads a bare `on` key as boolean True.
        if "on" not in doc and True not in doc:
            missing.append("on (triggers)")
        if missing:
            results.append(spec.violated(f"Workflow {rel} missing {', '.join(missing)}", rel))

    if not results:
        results.append(spec.passed(f"All {len(workflows)} CI workflow(s) declare name and triggers"))
    return results
