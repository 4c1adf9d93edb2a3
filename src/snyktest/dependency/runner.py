# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dependency vulnerability testing for package specifiers and project paths."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ..aggregate import collect_results
from ..backends.vuln_client import VulnLookup
from ..config import TestSettings, load_test_settings
from ..errors import SnykError
from ..models.finding import NormalizedFinding
from ..models.options import AnalysisMode, AnalysisOptions, Severity
from ..models.result import AggregatedOutcome, PerTargetResult
from ..models.target import TestTarget
from ..session import SessionContext
from ..utils.concurrency import map_bounded

logger = logging.getLogger(__name__)

VULN_INFO_URL = "https://snyk.io/vuln/"


def _int_or_none(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _list_field(vuln: dict[str, Any], key: str) -> list[Any]:
    value = vuln.get(key)
    return value if isinstance(value, list) else []


def normalize_vulnerabilities(payload: dict[str, Any], threshold: Severity | None = None) -> list[NormalizedFinding]:
    """Turn the backend `vulnerabilities` list into findings, dropping those below `threshold`."""
    findings: list[NormalizedFinding] = []
    for vuln in payload.get("vulnerabilities") or []:
        if not isinstance(vuln, dict):
            continue
        vuln_id = str(vuln.get("id") or "unknown")
        severity = Severity.parse(vuln.get("severity"), Severity.LOW)
        if threshold is not None and severity.rank < threshold.rank:
            continue
        findings.append(
            NormalizedFinding(
                id=vuln_id,
                title=str(vuln.get("title") or vuln_id),
                severity=severity,
                package_name=vuln.get("packageName") or vuln.get("name"),
                version=vuln.get("version"),
                introduced_by=tuple(str(item) for item in _list_field(vuln, "from")),
                # upgradePath entries are `false` where no upgrade exists.
                upgrade_path=tuple(str(item) for item in _list_field(vuln, "upgradePath") if item),
                url=vuln.get("url") or f"{VULN_INFO_URL}{vuln_id}",
            )
        )
    return findings


class DependencyTestRunner:
    """Tests targets against the vulnerability backend, one call per target."""

    mode = AnalysisMode.DEPENDENCY

    def __init__(
        self,
        vuln_client: VulnLookup,
        session: SessionContext,
        settings: TestSettings | None = None,
    ):
        self.vuln_client = vuln_client
        self.session = session
        self.settings = settings or load_test_settings()

    async def test_package(self, target: TestTarget | str, options: AnalysisOptions) -> PerTargetResult:
        if isinstance(target, str):
            target = TestTarget.parse(target, options)
        org = options.org or self.session.org
        query = {
            "package_manager": options.package_manager,
            "dev": target.dev,
            "org": org,
            "severity_threshold": target.severity_threshold,
        }
        logger.debug("Testing %s (%s)", target.spec, target.kind.value)
        if target.is_package:
            payload = await self.vuln_client.test_package(target.name or "", target.version or "", **query)
        else:
            payload = await self.vuln_client.test_manifest(target.spec, **query)

        return PerTargetResult(
            target=target,
            findings=tuple(normalize_vulnerabilities(payload, target.severity_threshold)),
            dependency_count=_int_or_none(payload.get("dependencyCount")),
            dev_dependency_count=_int_or_none(payload.get("devDependencyCount")),
            package_manager=payload.get("packageManager") or options.package_manager,
            org=payload.get("org") or org,
        )

    async def test_many(self, targets: Sequence[TestTarget], options: AnalysisOptions) -> AggregatedOutcome | SnykError:
        outcomes = await map_bounded(
            lambda target: self.test_package(target, options),
            targets,
            limit=self.settings.concurrency,
        )
        for target, outcome in zip(targets, outcomes):
            if isinstance(outcome, SnykError):
                logger.debug("Test failed for %s: %s", target.spec, outcome.message)
        return collect_results(targets, outcomes, self.mode)


__all__ = ["DependencyTestRunner", "normalize_vulnerabilities"]
