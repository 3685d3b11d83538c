"""Configuration externalization checks (Secrets, ConfigMaps, docs)."""

from __future__ import annotations

from secgate.checks.base import CheckContext, CheckSpec, read_text
from secgate.checks.manifests import manifest_files
from secgate.types import CheckResult


def _first_referencing(ctx: CheckContext, markers: tuple[str, ...]) -> str | None:
    for path in manifest_files(ctx):
        text = read_text(path)
        if text is not None and any(marker in text for marker in markers):
            return ctx.rel(path)
    return None


def check_secret_manifests(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    secret_files = [p for p in manifest_files(ctx) if "secret" in p.name.lower()]
    if secret_files:
        return [spec.passed(
            f"Kubernetes secrets are properly separated ({len(secret_files)} file(s))",
            ctx.rel(secret_files[0]),
        )]
    return [spec.violated("No Kubernetes secret files found - ensure secrets are externalized")]


def check_secret_key_refs(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    found = _first_referencing(ctx, ("secretKeyRef",))
    if found:
        return [spec.passed("Deployments properly reference Kubernetes secrets", found)]
    return [spec.violated("Deployments should reference secrets via secretKeyRef")]


def check_config_map_refs(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    found = _first_referencing(ctx, ("configMapKeyRef", "configMapRef"))
    if found:
        return [spec.passed("Deployments properly use ConfigMaps for configuration", found)]
    return [spec.violated("Consider using ConfigMaps for non-sensitive configuration")]


def check_secrets_documentation(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    doc = ctx.project_root / ctx.config.secrets_doc
    if doc.is_file():
        return [spec.passed("Secrets documentation exists", ctx.config.secrets_doc)]
    return [spec.violated(f"Secrets documentation missing ({ctx.config.secrets_doc})")]
