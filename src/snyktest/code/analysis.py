# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Static code analysis: backend call, SARIF normalization and findings."""

from __future__ import annotations

import copy
import logging
from collections.abc import Sequence
from typing import Any

from ..aggregate import collect_results
from ..backends.code_client import AnalysisSeverity, CodeClient
from ..config import TestSettings, load_test_settings
from ..errors import BackendError, InvalidArgumentError, SnykError
from ..models.finding import NormalizedFinding
from ..models.options import AnalysisMode, AnalysisOptions, Severity
from ..models.result import AggregatedOutcome, PerTargetResult
from ..models.target import TestTarget
from ..session import SessionContext
from ..utils.concurrency import map_bounded

logger = logging.getLogger(__name__)

SEVERITY_TO_ANALYSIS_SEVERITY: dict[Severity, AnalysisSeverity] = {
    Severity.LOW: AnalysisSeverity.INFO,
    Severity.MEDIUM: AnalysisSeverity.WARNING,
    Severity.HIGH: AnalysisSeverity.CRITICAL,
    Severity.CRITICAL: AnalysisSeverity.CRITICAL,
}

SARIF_LEVEL_TO_SEVERITY: dict[str, Severity] = {
    "note": Severity.LOW,
    "warning": Severity.MEDIUM,
    "error": Severity.HIGH,
}


def severity_to_analysis_severity(severity: Severity | None) -> AnalysisSeverity:
    if severity is None:
        return AnalysisSeverity.INFO
    return SEVERITY_TO_ANALYSIS_SEVERITY[severity]


def extract_sarif(response: Any) -> dict[str, Any]:
    """Accept a SARIF log, a `{"sarifResults": log}` wrapper, or a list of per-folder results."""
    if isinstance(response, list):
        response = response[0] if response else None
    if isinstance(response, dict):
        if isinstance(response.get("sarifResults"), dict):
            return response["sarifResults"]
        if isinstance(response.get("runs"), list):
            return response
    raise BackendError("Code analysis response did not contain SARIF results")


def _is_security_rule(rule: dict[str, Any]) -> bool:
    categories = (rule.get("properties") or {}).get("categories") or []
    return any(str(category).lower() == "security" for category in categories)


def parse_security_results(sarif: dict[str, Any]) -> dict[str, Any]:
    """
    Keep only security rules and the results that reference them.

    Runs without a rules list are left as they are. Returns a new log; the
    input is not modified, and applying the function twice changes nothing.
    """
    log = copy.deepcopy(sarif)
    for run in log.get("runs") or []:
        driver = (run.get("tool") or {}).get("driver") or {}
        rules = driver.get("rules")
        if not rules:
            continue
        security_rules = {rule.get("id"): rule for rule in rules if _is_security_rule(rule)}
        driver["rules"] = list(security_rules.values())
        if run.get("results") is not None:
            run["results"] = [result for result in run["results"] if result.get("ruleId") in security_rules]
    return log


def _location(result: dict[str, Any]) -> tuple[str | None, int | None]:
    locations = result.get("locations") or []
    if not locations:
        return None, None
    physical = locations[0].get("physicalLocation") or {}
    uri = (physical.get("artifactLocation") or {}).get("uri")
    line = (physical.get("region") or {}).get("startLine")
    return uri, line if isinstance(line, int) else None


def sarif_to_findings(sarif: dict[str, Any]) -> list[NormalizedFinding]:
    """One finding per SARIF result, in document order."""
    findings: list[NormalizedFinding] = []
    for run in sarif.get("runs") or []:
        driver = (run.get("tool") or {}).get("driver") or {}
        rules = {rule.get("id"): rule for rule in driver.get("rules") or []}
        for result in run.get("results") or []:
            rule_id = str(result.get("ruleId") or "unknown")
            rule = rules.get(rule_id) or {}
            title = (rule.get("shortDescription") or {}).get("text") or rule.get("name") or rule_id
            uri, line = _location(result)
            findings.append(
                NormalizedFinding(
                    id=rule_id,
                    title=title,
                    severity=SARIF_LEVEL_TO_SEVERITY.get(str(result.get("level")), Severity.LOW),
                    location=uri,
                    line=line,
                    message=(result.get("message") or {}).get("text"),
                )
            )
    return findings


async def get_code_analysis_and_parse_results(
    path: str,
    options: AnalysisOptions,
    *,
    session: SessionContext,
    code_client: CodeClient,
) -> dict[str, Any]:
    """Run code analysis for one path and return the security-only SARIF log."""
    if not path:
        raise InvalidArgumentError("A path is required for code analysis")
    # Sent only when enabled; clients skip node_modules by default.
    extra = {"traverse_node_modules": True} if options.traverse_node_modules else {}
    response = await code_client.analyze_folders(
        base_url=session.code_base_url,
        session_token=session.api_token or "",
        severity=severity_to_analysis_severity(options.severity),
        paths=[path],
        sarif=True,
        **extra,
    )
    return parse_security_results(extract_sarif(response))


class CodeAnalysisAdapter:
    """Runs code analysis for each directory target."""

    mode = AnalysisMode.CODE

    def __init__(
        self,
        code_client: CodeClient,
        session: SessionContext,
        settings: TestSettings | None = None,
    ):
        self.code_client = code_client
        self.session = session
        self.settings = settings or load_test_settings()

    async def test(self, target: TestTarget, options: AnalysisOptions) -> PerTargetResult:
        logger.debug("Running code analysis for %s", target.spec)
        sarif = await get_code_analysis_and_parse_results(
            target.spec,
            options,
            session=self.session,
            code_client=self.code_client,
        )
        return PerTargetResult(
            target=target,
            findings=tuple(sarif_to_findings(sarif)),
            org=options.org or self.session.org,
            sarif=sarif,
        )

    async def test_many(self, targets: Sequence[TestTarget], options: AnalysisOptions) -> AggregatedOutcome | SnykError:
        outcomes = await map_bounded(lambda target: self.test(target, options), targets, limit=self.settings.concurrency)
        return collect_results(targets, outcomes, self.mode)


__all__ = [
    "CodeAnalysisAdapter",
    "extract_sarif",
    "get_code_analysis_and_parse_results",
    "parse_security_results",
    "sarif_to_findings",
    "severity_to_analysis_severity",
]
