"""Container build descriptor checks."""

from __future__ import annotations

import re
from dataclasses import dataclass

from secgate.checks.base import CheckContext, CheckSpec, read_text
from secgate.tools import ToolUnavailable
from secgate.types import CheckResult

SECRET_LITERAL_RE = re.compile(r"password|secret|key|token", re.IGNORECASE)
ROOT_USERS = {"root", "0"}


@dataclass(frozen=True)
class Instruction:
    lineno: int
    keyword: str
    args: str


@dataclass(frozen=True)
class BaseImage:
    """A parsed ``FROM`` reference."""

    lineno: int
    reference: str
    image: str
    tag: str | None
    digest: str | None
    alias: str | None


def parse_instructions(text: str) -> list[Instruction]:
    """Split a Dockerfile into instructions, joining ``\\`` continuations."""
    instructions: list[Instruction] = []
    pending: list[str] = []
    start = 0
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not pending and (not line or line.startswith("#")):
            continue
        if not pending:
            start = lineno
        if line.endswith("\\"):
            pending.append(line[:-1].strip())
            continue
        pending.append(line)
        joined = " ".join(p for p in pending if p and not p.startswith("#"))
        pending = []
        keyword, _, args = joined.partition(" ")
        instructions.append(Instruction(start, keyword.upper(), args.strip()))
    if pending:
        joined = " ".join(p for p in pending if p)
        keyword, _, args = joined.partition(" ")
        instructions.append(Instruction(start, keyword.upper(), args.strip()))
    return instructions


def split_reference(reference: str) -> tuple[str, str | None, str | None]:
    """Split ``registry:port/name:tag@digest`` into (name, tag, digest)."""
    name, _, digest = reference.partition("@")
    tag = None
    last_segment = name.rsplit("/", 1)[-1]
    if ":" in last_segment:
        name, _, tag = name.rpartition(":")
    return name, tag or None, digest or None


def parse_base_images(text: str) -> list[BaseImage]:
    bases: list[BaseImage] = []
    for instr in parse_instructions(text):
        if instr.keyword != "FROM":
            continue
        tokens = [t for t in instr.args.split() if not t.startswith("--")]
        if not tokens:
            continue
        reference = tokens[0]
        alias = tokens[2] if len(tokens) >= 3 and tokens[1].upper() == "AS" else None
        image, tag, digest = split_reference(reference)
        bases.append(BaseImage(instr.lineno, reference, image, tag, digest, alias))
    return bases


def _load(ctx: CheckContext) -> str | None:
    if not ctx.dockerfile.is_file():
        return None
    return read_text(ctx.dockerfile)


def check_dockerfile_present(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    location = ctx.rel(ctx.dockerfile)
    if not ctx.dockerfile.is_file():
        return [spec.violated(f"Dockerfile not found at {location}", location)]
    return [spec.passed(f"Dockerfile found at {location}", location)]


def check_dockerfile_structure(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    text = _load(ctx)
    if text is None:
        return []
    location = ctx.rel(ctx.dockerfile)
    keywords = {instr.keyword for instr in parse_instructions(text)}
    missing = []
    if "FROM" not in keywords:
        missing.append("FROM")
    if not keywords & {"COPY", "ADD"}:
        missing.append("COPY/ADD")
    if missing:
        return [spec.violated(f"Dockerfile missing required instructions: {', '.join(missing)}", location)]
    return [spec.passed("Dockerfile has FROM and COPY/ADD instructions", location)]


def check_root_user(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    text = _load(ctx)
    if text is None:
        return []
    location = ctx.rel(ctx.dockerfile)
    root_lines = [
        instr.lineno
        for instr in parse_instructions(text)
        if instr.keyword == "USER" and instr.args.split(":")[0].strip() in ROOT_USERS
    ]
    if root_lines:
        lines = ", ".join(str(n) for n in root_lines)
        return [spec.violated(f"Dockerfile contains explicit root user usage (line {lines})", location)]
    return [spec.passed("No explicit root user usage found in Dockerfile", location)]


def check_tag_pinning(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    text = _load(ctx)
    if text is None:
        return []
    location = ctx.rel(ctx.dockerfile)
    bases = parse_base_images(text)
    stages = {b.alias.lower() for b in bases if b.alias}
    unpinned = [
        b for b in bases
        if b.image.lower() not in stages
        and b.image != "scratch"
        and ((b.tag is None and b.digest is None) or b.tag == "latest")
    ]
    if unpinned:
        refs = ", ".join(f"{b.reference} (line {b.lineno})" for b in unpinned)
        return [spec.violated(f"Dockerfile uses 'latest' tag or no tag (defaults to latest): {refs}", location)]
    return [spec.passed("Dockerfile uses specific version tags", location)]


def check_secret_literals(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    text = _load(ctx)
    if text is None:
        return []
    location = ctx.rel(ctx.dockerfile)
    hits = [
        (lineno, match.group(0))
        for lineno, line in enumerate(text.splitlines(), start=1)
        if (match := SECRET_LITERAL_RE.search(line))
    ]
    if hits:
        shown = ", ".join(f"line {n}: '{word}'" for n, word in hits[:5])
        more = f" (+{len(hits) - 5} more)" if len(hits) > 5 else ""
        return [spec.violated(f"Potential secrets found in Dockerfile ({shown}{more})", location)]
    return [spec.passed("No obvious secrets found in Dockerfile", location)]


def check_hadolint(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    if not ctx.dockerfile.is_file():
        return []
    location = ctx.rel(ctx.dockerfile)
    args = [str(ctx.dockerfile)]
    for rule in ctx.config.hadolint_ignore:
        args.extend(["--ignore", rule])

    outcome = ctx.tools.try_run("hadolint", args, cwd=ctx.project_root)
    if isinstance(outcome, ToolUnavailable):
        return [spec.skipped("hadolint not found - Dockerfile lint skipped")]
    if outcome.timed_out:
        return [spec.skipped(f"hadolint {outcome.output} - Dockerfile lint skipped")]
    if not outcome.success:
        findings = len([line for line in outcome.output.splitlines() if line.strip()])
        return [spec.violated(f"Hadolint found issues ({findings} line(s) of output)", location)]
    return [spec.passed("Hadolint security analysis passed", location)]
