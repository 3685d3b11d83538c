"""Shared building blocks for catalog checks."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path

from secgate.config import GateConfig
from secgate.tools import ToolRunner
from secgate.types import CheckKind, CheckResult

logger = logging.getLogger(__name__)


@dataclass
class CheckContext:
    """Everything a check may look at: the tree, the config, the tools."""

    project_root: Path
    config: GateConfig = field(default_factory=GateConfig)
    tools: ToolRunner = field(default_factory=ToolRunner)

    @property
    def dockerfile(self) -> Path:
        return self.project_root / self.config.dockerfile

    @property
    def manifests_dir(self) -> Path:
        return self.project_root / self.config.manifests_dir

    def rel(self, path: Path) -> str:
        """Project-relative POSIX path for messages and locations."""
        try:
            return path.relative_to(self.project_root).as_posix()
        except ValueError:
            return path.as_posix()


CheckFn = Callable[[CheckContext, "CheckSpec"], list[CheckResult]]


@dataclass(frozen=True)
class CheckSpec:
    """One row of the check catalog.

    ``on_violation`` is the severity policy for the row: a check reports a
    broken rule through ``violated`` and never picks the kind itself.
    """

    check_id: str
    title: str
    group: str
    on_violation: CheckKind
    run: CheckFn

    def passed(self, message: str, location: str | None = None) -> CheckResult:
        return CheckResult(self.check_id, CheckKind.PASS, message, location)

    def violated(self, message: str, location: str | None = None) -> CheckResult:
        return CheckResult(self.check_id, self.on_violation, message, location)

    def skipped(self, message: str) -> CheckResult:
        """Advisory tool missing or unusable: always a warning."""
        return CheckResult(self.check_id, CheckKind.WARN, message)


def read_text(path: Path) -> str | None:
    """Read a file as text, or None if it cannot be read."""
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.warning("skipping unreadable file %s: %s", path, exc)
        return None


def matches_any(rel_path: str, patterns: Iterable[str]) -> bool:
    """fnmatch against each pattern; a leading ``**/`` also matches at the root."""
    for pattern in patterns:
        if fnmatch(rel_path, pattern):
            return True
        if pattern.startswith("**/") and fnmatch(rel_path, pattern[3:]):
            return True
    return False


def iter_files(
    root: Path,
    extensions: Iterable[str],
    *,
    excluded_dirs: Iterable[str] = (),
    skip_hidden: bool = False,
) -> Iterator[Path]:
    """Walk ``root`` in sorted order yielding files with a matching suffix.

    ``excluded_dirs`` prunes directories by name anywhere in the tree;
    ``.git`` is always pruned.
    """
    suffixes = tuple(ext.lower() for ext in extensions)
    pruned = {".git", *excluded_dirs}
    if not root.is_dir():
        return
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(
            d for d in dirnames
            if d not in pruned and not (skip_hidden and d.startswith("."))
        )
        for name in sorted(filenames):
            if skip_hidden and name.startswith("."):
                continue
            if name.lower().endswith(suffixes):
                yield Path(dirpath) / name
