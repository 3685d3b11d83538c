"""Kubernetes manifest checks."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator
from pathlib import Path

import yaml

from secgate.checks.base import CheckContext, CheckSpec, iter_files, read_text
from secgate.types import CheckResult

logger = logging.getLogger(__name__)

MANIFEST_EXTENSIONS = (".yaml", ".yml")

# Key containing "password" with an inline scalar value. Nested mappings
# (valueFrom/secretKeyRef) and empty strings are not literals.
PASSWORD_LITERAL_RE = re.compile(
    r"""^[ \t]*(?:-[ \t]+)?["']?[\w.-]*password[\w.-]*["']?\s*:[ \t]*(?P<value>[^\s#].*?)\s*$""",
    re.MULTILINE,
)
# Only used for files that do not parse as YAML.
PRIVILEGED_RE = re.compile(
    r"""^[ \t]*(?:-[ \t]+)?privileged\s*:\s*["']?true["']?[ \t]*(?:#.*)?$""",
    re.MULTILINE | re.IGNORECASE,
)
TRAILING_COMMENT_RE = re.compile(r"\s+#.*$")
PLACEHOLDER_VALUES = ('""', "''", "~", "null")


def manifest_files(ctx: CheckContext) -> list[Path]:
    return list(iter_files(ctx.manifests_dir, MANIFEST_EXTENSIONS))


def load_documents(text: str) -> list[dict] | None:
    """Parse every YAML document in ``text``; None if any fails to parse.

    PyYAML raises plain ValueError for malformed implicit scalars such as
    ``2024-13-45``, so that counts as a parse failure too.
    """
    try:
        return [doc for doc in yaml.safe_load_all(text) if isinstance(doc, dict)]
    except (yaml.YAMLError, ValueError):
        return None


def _is_true(value: object) -> bool:
    return value is True or (isinstance(value, str) and value.lower() == "true")


def find_privileged(node: object, path: str = "") -> Iterator[str]:
    """Yield the dotted path of every ``privileged`` key set to true."""
    if isinstance(node, dict):
        for key, value in node.items():
            child = f"{path}.{key}" if path else str(key)
            if key == "privileged" and _is_true(value):
                yield child
            else:
                yield from find_privileged(value, child)
    elif isinstance(node, list):
        for index, item in enumerate(node):
            yield from find_privileged(item, f"{path}[{index}]")


def _child(node: object, key: str) -> dict:
    value = node.get(key) if isinstance(node, dict) else None
    return value if isinstance(value, dict) else {}


def _pod_spec(doc: dict) -> dict:
    spec = _child(doc, "spec")
    if doc.get("kind") == "Pod":
        return spec
    if doc.get("kind") == "CronJob":
        spec = _child(_child(spec, "jobTemplate"), "spec")
    return _child(_child(spec, "template"), "spec")


def _containers(pod_spec: dict) -> list[dict]:
    containers = pod_spec.get("containers")
    if not isinstance(containers, list):
        return []
    return [c for c in containers if isinstance(c, dict)]


def _has_limits(pod_spec: dict) -> bool:
    containers = _containers(pod_spec)
    return bool(containers) and all(_child(c, "resources").get("limits") for c in containers)


def _has_security_context(pod_spec: dict) -> bool:
    if pod_spec.get("securityContext"):
        return True
    containers = _containers(pod_spec)
    return bool(containers) and all(c.get("securityContext") for c in containers)


def iter_workloads(ctx: CheckContext) -> Iterator[tuple[Path, str, dict | None, str]]:
    """Yield (path, resource label, pod spec, raw text) per workload resource.

    The pod spec is None when the file does not parse; callers then fall
    back to a plain text search of the raw file.
    """
    kinds = set(ctx.config.workload_kinds)
    for path in manifest_files(ctx):
        text = read_text(path)
        if text is None:
            continue
        docs = load_documents(text)
        if docs is None:
            logger.debug("falling back to text scan for unparsable manifest %s", path)
            for kind in sorted(kinds):
                if re.search(rf"^\s*kind:\s*{re.escape(kind)}\s*$", text, re.MULTILINE):
                    yield path, kind, None, text
            continue
        for doc in docs:
            kind = doc.get("kind")
            if not isinstance(kind, str) or kind not in kinds:
                continue
            name = _child(doc, "metadata").get("name")
            if not isinstance(name, str):
                name = "<unnamed>"
            yield path, f"{kind}/{name}", _pod_spec(doc), text


def check_manifests_present(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    location = ctx.rel(ctx.manifests_dir)
    if not ctx.manifests_dir.is_dir():
        return [spec.violated(f"Kubernetes manifests directory not found at {location}", location)]
    count = len(manifest_files(ctx))
    return [spec.passed(f"Kubernetes manifests directory found ({count} manifest file(s))", location)]


def check_hardcoded_passwords(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    if not ctx.manifests_dir.is_dir():
        return []
    results = []
    for path in manifest_files(ctx):
        text = read_text(path)
        if text is None:
            continue
        hits = []
        for m in PASSWORD_LITERAL_RE.finditer(text):
            value = TRAILING_COMMENT_RE.sub("", m.group("value"))
            if value not in PLACEHOLDER_VALUES and not value.startswith(("{{", "${")):
                hits.append(m)
        if hits:
            lineno = text.count("\n", 0, hits[0].start()) + 1
            results.append(spec.violated(
                f"Potential hardcoded password in {ctx.rel(path)} (line {lineno})",
                ctx.rel(path),
            ))
    if not results:
        results.append(spec.passed("No hardcoded passwords found in Kubernetes manifests"))
    return results


def check_privileged(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    if not ctx.manifests_dir.is_dir():
        return []
    results = []
    for path in manifest_files(ctx):
        text = read_text(path)
        if text is None:
            continue
        docs = load_documents(text)
        if docs is not None:
            found = [key for doc in docs for key in find_privileged(doc)]
            if found:
                results.append(spec.violated(
                    f"Privileged container in {ctx.rel(path)} ({', '.join(found)})",
                    ctx.rel(path),
                ))
            continue
        match = PRIVILEGED_RE.search(text)
        if match:
            lineno = text.count("\n", 0, match.start()) + 1
            results.append(spec.violated(
                f"Privileged container in {ctx.rel(path)} (line {lineno})",
                ctx.rel(path),
            ))
    if not results:
        results.append(spec.passed("No privileged containers found"))
    return results


def _missing_report(
    ctx: CheckContext,
    spec: CheckSpec,
    predicate: Callable[[dict], bool],
    text_marker: str,
    what: str,
) -> list[CheckResult]:
    if not ctx.manifests_dir.is_dir():
        return []
    missing = []
    for path, label, pod_spec, text in iter_workloads(ctx):
        ok = predicate(pod_spec) if pod_spec is not None else text_marker in text
        if not ok:
            missing.append(f"{label} ({ctx.rel(path)})")
    if missing:
        return [spec.violated(f"{len(missing)} workload(s) have no {what}: {', '.join(missing)}")]
    return [spec.passed(f"All deployments have {what} defined")]


def check_resource_limits(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    return _missing_report(ctx, spec, _has_limits, "limits:", "resource limits")


def check_security_context(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    return _missing_report(ctx, spec, _has_security_context, "securityContext:", "security context")
