"""Core gate types: check outcomes, run report, verdict and exit codes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

EXIT_OK = 0
EXIT_GATE_FAILED = 1
EXIT_ENV_ERROR = 2


class CheckKind(str, Enum):
    """Outcome classification of a single check result."""

    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


class Verdict(str, Enum):
    """Final classification of a gate run."""

    SUCCESS = "success"
    SUCCESS_WITH_WARNINGS = "success_with_warnings"
    FAILURE = "failure"

    @property
    def exit_code(self) -> int:
        """Process exit code for this verdict. Warnings never block."""
        if self is Verdict.FAILURE:
            return EXIT_GATE_FAILED
        return EXIT_OK


@dataclass(frozen=True)
class CheckResult:
    """Individual check result."""

    check_id: str
    kind: CheckKind
    message: str
    location: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary, omitting an empty location."""
        data = {
            "check_id": self.check_id,
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.location:
            data["location"] = self.location
        return data


@dataclass
class GateRunReport:
    """Aggregate state of one gate run.

    Counters only move through ``record``/``extend`` so that
    ``passed + warned + failed == len(results)`` always holds.
    """

    project_root: Path
    passed: int = 0
    warned: int = 0
    failed: int = 0
    results: list[CheckResult] = field(default_factory=list)

    def record(self, result: CheckResult) -> None:
        """Append one result and bump its counter."""
        if result.kind is CheckKind.PASS:
            self.passed += 1
        elif result.kind is CheckKind.WARN:
            self.warned += 1
        else:
            self.failed += 1
        self.results.append(result)

    def extend(self, results: list[CheckResult]) -> None:
        for result in results:
            self.record(result)

    @property
    def total(self) -> int:
        return self.passed + self.warned + self.failed

    def results_for(self, check_id: str) -> list[CheckResult]:
        """Results emitted by one check, in emission order."""
        return [r for r in self.results if r.check_id == check_id]


class GateError(RuntimeError):
    """Operational error that aborts a run (not a gate verdict)."""


class ProjectRootError(GateError):
    """Project root is missing, not a directory, or unreadable."""


class ConfigError(GateError):
    """Gate configuration file is malformed or invalid."""
