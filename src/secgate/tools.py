"""Adapter for optional advisory tools (hadolint, trufflehog, php, ...).

Tools are probed on PATH before use. A missing binary is reported as
``ToolUnavailable`` and the caller decides how to grade it; the adapter
never raises for a tool that is absent, fails, or hangs.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_TOOL_TIMEOUT = 120.0


@dataclass(frozen=True)
class ToolRan:
    """Result envelope for a tool that was located and executed."""

    tool: str
    argv: tuple[str, ...]
    success: bool
    output: str
    returncode: int | None = None
    timed_out: bool = False


@dataclass(frozen=True)
class ToolUnavailable:
    """The tool binary could not be located on PATH."""

    tool: str


ToolOutcome = ToolRan | ToolUnavailable


class ToolRunner:
    """Run advisory tools as bounded child processes."""

    def __init__(self, timeout: float = DEFAULT_TOOL_TIMEOUT) -> None:
        self.timeout = timeout

    def locate(self, tool: str) -> str | None:
        return shutil.which(tool)

    def is_available(self, tool: str) -> bool:
        return self.locate(tool) is not None

    def try_run(self, tool: str, args: list[str], *, cwd: Path | None = None) -> ToolOutcome:
        """Run ``tool`` with ``args`` if it is installed.

        Args:
            tool: Binary name looked up on PATH
            args: Arguments passed after the binary
            cwd: Working directory for the child process

        Returns:
            ToolUnavailable if the binary is missing, otherwise ToolRan
        """
        exe = self.locate(tool)
        if exe is None:
            logger.debug("tool %s not found on PATH", tool)
            return ToolUnavailable(tool=tool)

        argv = (exe, *args)
        logger.debug("running %s", " ".join(argv))
        try:
            completed = subprocess.run(
                list(argv),
                cwd=cwd,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning("%s timed out after %ss", tool, self.timeout)
            return ToolRan(
                tool=tool,
                argv=argv,
                success=False,
                output=f"timed out after {self.timeout:g}s",
                timed_out=True,
            )
        except OSError as exc:
            # Located but not executable (broken symlink, permissions).
            logger.warning("%s could not be started: %s", tool, exc)
            return ToolUnavailable(tool=tool)

        output = (completed.stdout or "") + (completed.stderr or "")
        return ToolRan(
            tool=tool,
            argv=argv,
            success=completed.returncode == 0,
            output=output,
            returncode=completed.returncode,
        )
