"""Base image and datastore image hygiene."""

from __future__ import annotations

import re

from secgate.checks.base import CheckContext, CheckSpec, read_text
from secgate.checks.dockerfile import BaseImage, parse_base_images
from secgate.checks.manifests import manifest_files
from secgate.types import CheckResult


def final_base_image(bases: list[BaseImage]) -> BaseImage | None:
    """Resolve the image the last build stage ultimately derives from."""
    if not bases:
        return None
    by_alias = {b.alias.lower(): b for b in bases if b.alias}
    current = bases[-1]
    seen: set[str] = set()
    while current.image.lower() in by_alias and current.image.lower() not in seen:
        seen.add(current.image.lower())
        current = by_alias[current.image.lower()]
    return current


def is_minimal(base: BaseImage, variants: tuple[str, ...]) -> bool:
    if not variants:
        return False
    name = base.image.rsplit("/", 1)[-1].lower()
    if name in variants:
        return True
    if base.tag is None:
        return False
    pattern = r"(^|[-_.])(" + "|".join(re.escape(v) for v in variants) + r")"
    return re.search(pattern, base.tag.lower()) is not None


def check_base_image_minimal(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    if not ctx.dockerfile.is_file():
        return []
    text = read_text(ctx.dockerfile)
    if text is None:
        return []
    location = ctx.rel(ctx.dockerfile)
    base = final_base_image(parse_base_images(text))
    if base is not None and is_minimal(base, ctx.config.minimal_variants):
        return [spec.passed(f"Using minimal/secure base image ({base.reference})", location)]
    variants = "/".join(ctx.config.minimal_variants)
    shown = base.reference if base else "none"
    return [spec.violated(f"Consider using {variants} base images for security (current: {shown})", location)]


def check_database_image_pinned(ctx: CheckContext, spec: CheckSpec) -> list[CheckResult]:
    image = ctx.config.database_image
    pinned = re.compile(rf"(?<![\w-]){re.escape(image)}:[0-9]+\.[0-9]+")
    for path in manifest_files(ctx):
        text = read_text(path)
        if text is not None and pinned.search(text):
            return [spec.passed(f"Using specific {image} version", ctx.rel(path))]
    return [spec.violated(f"Consider pinning {image} to a specific version")]
