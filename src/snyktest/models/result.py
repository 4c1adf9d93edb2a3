# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Per-target and aggregated result models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..errors import SnykError
from .finding import NormalizedFinding
from .options import AnalysisMode
from .target import TestTarget


@dataclass(frozen=True)
class PerTargetResult:
    """
    Outcome of testing one target.

    `error` is set when this target failed inside a multi-target run; such a
    result has no findings and never counts as vulnerable.
    """

    target: TestTarget
    findings: tuple[NormalizedFinding, ...] = ()
    dependency_count: int | None = None
    dev_dependency_count: int | None = None
    package_manager: str | None = None
    org: str | None = None
    sarif: dict[str, Any] | None = None
    error: SnykError | None = None

    @property
    def vulnerable_count(self) -> int:
        return len(self.findings)

    @property
    def unique_count(self) -> int:
        return len({finding.id for finding in self.findings})

    @property
    def is_vulnerable(self) -> bool:
        return self.error is None and self.vulnerable_count > 0

    @property
    def only_dev_dependencies(self) -> bool:
        """True when the project has dev dependencies but no production ones."""
        return self.dependency_count == 0 and bool(self.dev_dependency_count)

    def to_dict(self) -> dict[str, Any]:
        if self.error is not None:
            return {"ok": False, "path": self.target.spec, "error": self.error.to_dict()}
        data: dict[str, Any] = {
            "ok": not self.is_vulnerable,
            "vulnerabilities": [finding.to_dict() for finding in self.findings],
            "dependencyCount": self.dependency_count,
            "packageManager": self.package_manager,
            "org": self.org,
            "path": self.target.spec,
            "uniqueCount": self.unique_count,
        }
        return data


@dataclass(frozen=True)
class AggregatedOutcome:
    """Combined verdict across every target of one invocation."""

    results: tuple[PerTargetResult, ...]
    mode: AnalysisMode
    total_projects: int
    vulnerable_projects: int
    summary_line: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "totalProjects": self.total_projects,
            "vulnerableProjects": self.vulnerable_projects,
            "summary": self.summary_line,
            "results": [result.to_dict() for result in self.results],
        }


__all__ = ["AggregatedOutcome", "PerTargetResult"]
