"""Repository-wide secret detection."""

from __future__ import annotations

import re

from secgate.checks.base import CheckContext, CheckSpec, iter_files, read_text
from secgate.tools import ToolUnavailable
from secgate.types import CheckResult

# Credential-assignment shapes plus long base64-like runs. The last one is
# noisy (hashes, minified assets) and there is no suppression list.
SECRET_PATTERNS: tuple[str, ...] = (
    r"password.*=.*[^{]",
    r"secret.*=.*[^{]",
    r"api[_-]?key.*=.*[^{]",
    r"token.*=.*[^{]",
    r"auth.*=.*[^{]",
    r"[A-Za-z0-9/+]{40,}",
)

_COMPILED = tuple(re.compile(p, re.IGNORECASE) for p in SECRET_PATTERNS)


def check_secret_patterns(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    matches: dict[str, list[str]] = {p: [] for p in SECRET_PATTERNS}
    files = iter_files(
        ctx.project_root,
        ctx.config.secret_scan_extensions,
        excluded_dirs=ctx.config.excluded_dirs,
        skip_hidden=True,
    )
    for path in files:
        text = read_text(path)
        if text is None:
            continue
        lines = text.splitlines()
        for pattern, regex in zip(SECRET_PATTERNS, _COMPILED):
            # Line-wise, so `[^{]` never matches a newline.
            if any(regex.search(line) for line in lines):
                matches[pattern].append(ctx.rel(path))

    results = []
    for pattern, hits in matches.items():
        if hits:
            results.append(spec.violated(
                f"Potential secrets found matching pattern: {pattern} ({len(hits)} file(s), first: {hits[0]})",
                hits[0],
            ))
    if not results:
        results.append(spec.passed("No obvious secrets found in source files"))
    return results


def check_secret_scanner(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    outcome = ctx.tools.try_run(
        "trufflehog",
        ["filesystem", str(ctx.project_root), "--only-verified"],
        cwd=ctx.project_root,
    )
    if isinstance(outcome, ToolUnavailable):
        return [spec.skipped("trufflehog not found - verified secret scan skipped")]
    if outcome.timed_out:
        return [spec.skipped(f"trufflehog {outcome.output} - verified secret scan skipped")]
    if not outcome.success:
        return [spec.violated(f"TruffleHog found potential issues (exit code {outcome.returncode})")]
    return [spec.passed("TruffleHog scan completed")]
