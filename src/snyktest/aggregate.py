# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Merge per-target results into one AggregatedOutcome."""

from __future__ import annotations

from collections.abc import Sequence

from .errors import SnykError
from .models.options import AnalysisMode
from .models.result import AggregatedOutcome, PerTargetResult
from .models.target import TestTarget


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


def _dependencies_text(result: PerTargetResult) -> str:
    if result.dependency_count is None:
        return result.target.spec
    return f"{result.dependency_count} dependencies"


def summary_line(results: Sequence[PerTargetResult], mode: AnalysisMode) -> str:
    """
    Final line of the human report.

    The wording is an output contract; callers match it verbatim.
    """
    total = len(results)
    vulnerable = sum(1 for result in results if result.is_vulnerable)

    if total != 1 or results[0].error is not None:
        if vulnerable:
            return f"Tested {total} projects, {vulnerable} contained vulnerable paths."
        return f"Tested {total} projects, no vulnerable paths were found."

    result = results[0]
    if mode is AnalysisMode.CODE:
        count = result.vulnerable_count
        if count:
            return f"✗ {count} Code {_plural(count, 'issue', 'issues')} found"
        return "✔ Test completed, no Code issues found."

    if result.is_vulnerable:
        unique = result.unique_count
        paths = result.vulnerable_count
        return (
            f"Tested {_dependencies_text(result)} for known vulnerabilities, "
            f"found {unique} {_plural(unique, 'vulnerability', 'vulnerabilities')}, "
            f"{paths} vulnerable {_plural(paths, 'path', 'paths')}."
        )

    subject = result.target.spec if result.target.is_package else _dependencies_text(result)
    return f"✓ Tested {subject} for known vulnerabilities, no vulnerable paths found."


def aggregate(results: Sequence[PerTargetResult], mode: AnalysisMode) -> AggregatedOutcome:
    """Pure merge; result order is input order."""
    ordered = tuple(results)
    return AggregatedOutcome(
        results=ordered,
        mode=mode,
        total_projects=len(ordered),
        vulnerable_projects=sum(1 for result in ordered if result.is_vulnerable),
        summary_line=summary_line(ordered, mode),
    )


def collect_results(
    targets: Sequence[TestTarget],
    outcomes: Sequence[PerTargetResult | SnykError],
    mode: AnalysisMode,
) -> AggregatedOutcome | SnykError:
    """
    Fold per-target outcomes, isolating failures.

    Failed targets stay in the result list with `error` set. When every
    target failed, the first target's error is returned instead.
    """
    if outcomes and all(isinstance(outcome, SnykError) for outcome in outcomes):
        return outcomes[0]  # type: ignore[return-value]
    results = [
        PerTargetResult(target=target, error=outcome) if isinstance(outcome, SnykError) else outcome
        for target, outcome in zip(targets, outcomes)
    ]
    return aggregate(results, mode)


__all__ = ["aggregate", "collect_results", "summary_line"]
