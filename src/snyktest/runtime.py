# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level facade wiring the session, HTTP client and dispatcher."""

from __future__ import annotations

from typing import Any

from .config import TestSettings
from .ecosystems import CODE_ECOSYSTEM, EcosystemDispatcher, build_dispatcher
from .errors import SnykError
from .formatting.formatter import ReportFormatter
from .http.client import HttpClient, create_default_http_client
from .models.options import AnalysisOptions
from .models.outcome import Failure, TerminalOutcome
from .session import SessionContext, load_session


class SnykTest:
    """
    Convenience wrapper that shares one HTTP client across every backend call.

    `test()` mirrors `snyktest test <spec>...`: options are the CLI flags as
    keyword arguments and the result is a TerminalOutcome.
    """

    __test__ = False  # not a pytest class

    def __init__(
        self,
        session: SessionContext | None = None,
        http_client: HttpClient | None = None,
        settings: TestSettings | None = None,
        dispatcher: EcosystemDispatcher | None = None,
    ):
        self.session = session or load_session()
        self.http_client = http_client or create_default_http_client()
        self.dispatcher = dispatcher or build_dispatcher(self.session, self.http_client, settings)

    async def test(self, *specs: str, **options: Any) -> TerminalOutcome:
        try:
            analysis_options = AnalysisOptions.from_mapping(options)
        except SnykError as exc:
            formatter = ReportFormatter(AnalysisOptions(json=bool(options.get("json")), sarif=bool(options.get("sarif"))))
            return Failure(error=exc, report=formatter.render_error(exc))
        ecosystem = CODE_ECOSYSTEM if analysis_options.code else analysis_options.package_manager
        targets = list(specs) or [analysis_options.path or "."]
        return await self.dispatcher.test_ecosystem(ecosystem, targets, analysis_options)

    async def aclose(self) -> None:
        await self.http_client.aclose()

    async def __aenter__(self) -> SnykTest:
        return self

    async def __aexit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        await self.aclose()
