# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Ecosystem dispatch.

The analysis mode is decided once per invocation. Every downstream component
(runner, aggregator, formatter) is written against that single mode.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from typing import Protocol

from .backends.code_client import HttpCodeClient
from .backends.flags import FeatureFlagClient
from .backends.vuln_client import HttpVulnClient
from .classify import classify
from .code.analysis import CodeAnalysisAdapter
from .config import TestSettings, load_test_settings
from .dependency.runner import DependencyTestRunner
from .errors import InvalidArgumentError, SnykError, UnsupportedEcosystemError
from .feature_flags import FeatureFlagGate
from .formatting.formatter import ReportFormatter
from .http.client import HttpClient
from .models.options import AnalysisMode, AnalysisOptions
from .models.outcome import TerminalOutcome
from .models.result import AggregatedOutcome
from .models.target import TestTarget
from .session import SessionContext

logger = logging.getLogger(__name__)

CODE_ECOSYSTEM = "code"
DEPENDENCY_ECOSYSTEMS = ("npm", "yarn", "pip", "maven", "rubygems")
SUPPORTED_ECOSYSTEMS = (CODE_ECOSYSTEM, *DEPENDENCY_ECOSYSTEMS)


class TargetRunner(Protocol):
    mode: AnalysisMode

    async def test_many(self, targets: Sequence[TestTarget], options: AnalysisOptions) -> AggregatedOutcome | SnykError: ...


def select_mode(ecosystem: str, options: AnalysisOptions) -> AnalysisMode:
    if options.code or ecosystem == CODE_ECOSYSTEM:
        return AnalysisMode.CODE
    return AnalysisMode.DEPENDENCY


class EcosystemDispatcher:
    """Gate, route, aggregate and classify one test invocation."""

    def __init__(
        self,
        gate: FeatureFlagGate,
        code_adapter: TargetRunner,
        dependency_runner: TargetRunner,
    ):
        self.gate = gate
        self.runners: dict[AnalysisMode, TargetRunner] = {
            AnalysisMode.CODE: code_adapter,
            AnalysisMode.DEPENDENCY: dependency_runner,
        }

    async def test_ecosystem(
        self,
        ecosystem: str,
        targets: Sequence[str | TestTarget],
        options: AnalysisOptions,
    ) -> TerminalOutcome:
        try:
            result = await self._run(ecosystem, targets, options)
        except SnykError as exc:
            logger.debug("Test run failed: %s (%s)", exc.message, exc.kind)
            result = exc
        return classify(result, ReportFormatter(options))

    async def _run(
        self,
        ecosystem: str,
        targets: Sequence[str | TestTarget],
        options: AnalysisOptions,
    ) -> AggregatedOutcome | SnykError:
        if ecosystem not in SUPPORTED_ECOSYSTEMS:
            raise UnsupportedEcosystemError(ecosystem)
        if not targets:
            raise InvalidArgumentError("No test targets were given")

        mode = select_mode(ecosystem, options)
        if mode is AnalysisMode.CODE:
            options = replace(options, code=True)
        else:
            options = replace(options, package_manager=ecosystem)
        parsed = [
            target if isinstance(target, TestTarget) else TestTarget.parse(target, options, code=mode is AnalysisMode.CODE)
            for target in targets
        ]
        logger.debug("Testing %d target(s) in %s mode (%s)", len(parsed), mode.value, ecosystem)

        await self.gate.ensure_mode_entitled(mode, org=options.org)
        return await self.runners[mode].test_many(parsed, options)


def build_dispatcher(
    session: SessionContext,
    http_client: HttpClient,
    settings: TestSettings | None = None,
) -> EcosystemDispatcher:
    """Wire the default httpx-backed collaborators for `session`."""
    settings = settings or load_test_settings()
    return EcosystemDispatcher(
        gate=FeatureFlagGate(FeatureFlagClient(http_client, session), session, settings),
        code_adapter=CodeAnalysisAdapter(HttpCodeClient(http_client, session), session, settings),
        dependency_runner=DependencyTestRunner(HttpVulnClient(http_client, session), session, settings),
    )


async def test_ecosystem(
    ecosystem: str,
    targets: Sequence[str | TestTarget],
    options: AnalysisOptions,
    *,
    session: SessionContext,
    http_client: HttpClient,
) -> TerminalOutcome:
    return await build_dispatcher(session, http_client).test_ecosystem(ecosystem, targets, options)


test_ecosystem.__test__ = False  # type: ignore[attr-defined]

__all__ = [
    "CODE_ECOSYSTEM",
    "DEPENDENCY_ECOSYSTEMS",
    "EcosystemDispatcher",
    "SUPPORTED_ECOSYSTEMS",
    "TargetRunner",
    "build_dispatcher",
    "select_mode",
    "test_ecosystem",
]
