# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Human-readable test reports."""

from __future__ import annotations

from ..aggregate import summary_line
from ..models.finding import NormalizedFinding
from ..models.options import AnalysisMode, AnalysisOptions, Severity, ShowVulnPaths
from ..models.result import AggregatedOutcome, PerTargetResult

SEPARATOR = "\n\n-------------------------------------------------------\n\n"
DEV_DEPS_TIP = (
    "Tip: Snyk only tests production dependencies by default "
    "(which this project had none). Try re-running with the `--dev` flag."
)
SOME_PATHS_LIMIT = 3
META_LABEL_WIDTH = 19
CODE_SEVERITY_ORDER = (Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL)


def _meta(rows: list[tuple[str, str | None]]) -> str:
    return "\n".join(f"{label + ':':<{META_LABEL_WIDTH}}{value}" for label, value in rows if value)


def _group_by_id(findings: tuple[NormalizedFinding, ...]) -> dict[str, list[NormalizedFinding]]:
    grouped: dict[str, list[NormalizedFinding]] = {}
    for finding in findings:
        grouped.setdefault(finding.id, []).append(finding)
    return grouped


def _introduced_through(paths: list[tuple[str, ...]]) -> str:
    direct: list[str] = []
    for path in paths:
        entry = path[1] if len(path) > 1 else path[0]
        if entry not in direct:
            direct.append(entry)
    return ", ".join(direct)


def _vulnerability_block(occurrences: list[NormalizedFinding], show_paths: ShowVulnPaths) -> str:
    first = occurrences[0]
    lines = [
        f"✗ {first.severity.label} severity vulnerability found in {first.package_name or first.id}",
        f"  Description: {first.title}",
        f"  Info: {first.url or first.id}",
    ]
    paths = [finding.introduced_by for finding in occurrences if finding.introduced_by]
    if paths:
        lines.append(f"  Introduced through: {_introduced_through(paths)}")
        if show_paths is not ShowVulnPaths.NONE:
            shown = paths if show_paths is ShowVulnPaths.ALL else paths[:SOME_PATHS_LIMIT]
            lines.extend(f"  From: {' > '.join(path)}" for path in shown)
            if len(paths) > len(shown):
                lines.append(f"  and {len(paths) - len(shown)} more...")
    upgrades = next((finding.upgrade_path for finding in occurrences if finding.upgrade_path), ())
    if upgrades:
        lines.append(f"  Remediation: Upgrade to {upgrades[0]}")
    return "\n".join(lines)


def render_dependency_target(result: PerTargetResult, options: AnalysisOptions, summary: str) -> str:
    header = f"Testing {result.target.spec}..."
    if result.error is not None:
        return f"{header}\n\n{result.error.user_message or result.error.message}"

    parts = [header]
    parts.extend(
        _vulnerability_block(occurrences, options.show_vuln_paths)
        for occurrences in _group_by_id(result.findings).values()
    )
    parts.append(
        _meta(
            [
                ("Organization", result.org),
                ("Package manager", result.package_manager),
                ("Open source", "yes" if result.target.is_package else "no"),
                ("Project path", result.target.spec),
            ]
        )
    )
    parts.append(summary)
    return "\n\n".join(parts)


def _code_issue(finding: NormalizedFinding) -> str:
    lines = [f" ✗ [{finding.severity.label}] {finding.title}"]
    if finding.location:
        where = f"{finding.location}, line {finding.line}" if finding.line is not None else finding.location
        lines.append(f"   Path: {where}")
    if finding.message:
        lines.append(f"   Info: {finding.message}")
    return "\n".join(lines)


def render_code_target(result: PerTargetResult, options: AnalysisOptions, summary: str) -> str:
    header = f"Testing {result.target.spec} ..."
    if result.error is not None:
        return f"{header}\n\n{result.error.user_message or result.error.message}"

    parts = [header]
    for severity in CODE_SEVERITY_ORDER:
        parts.extend(_code_issue(finding) for finding in result.findings if finding.severity is severity)
    parts.append("✔ Test completed")
    parts.append(
        _meta(
            [
                ("Organization", result.org),
                ("Test type", "Static code analysis"),
                ("Project path", result.target.spec),
            ]
        )
    )
    counts = []
    for severity in reversed(CODE_SEVERITY_ORDER):
        count = sum(1 for finding in result.findings if finding.severity is severity)
        if count:
            counts.append(f"{count} [{severity.label}]")
    summary_block = "Summary:\n\n"
    if counts:
        summary_block += "  ".join(counts) + "\n"
    parts.append(summary_block + summary)
    return "\n\n".join(parts)


def render_human(outcome: AggregatedOutcome, options: AnalysisOptions) -> str:
    render_target = render_code_target if outcome.mode is AnalysisMode.CODE else render_dependency_target

    if outcome.total_projects == 1:
        result = outcome.results[0]
        text = render_target(result, options, outcome.summary_line)
        if (
            outcome.mode is AnalysisMode.DEPENDENCY
            and not options.dev
            and not result.is_vulnerable
            and result.only_dev_dependencies
        ):
            text = f"{text}\n\n{DEV_DEPS_TIP}"
        return text

    blocks = [render_target(result, options, summary_line([result], outcome.mode)) for result in outcome.results]
    return SEPARATOR.join(blocks) + f"\n\n\n{outcome.summary_line}"


__all__ = ["DEV_DEPS_TIP", "SEPARATOR", "render_human"]
