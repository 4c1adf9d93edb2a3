# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Render outcomes as the text a caller prints plus a machine-readable payload."""

from __future__ import annotations

from ..errors import SnykError
from ..models.options import AnalysisOptions
from ..models.outcome import RenderedReport
from ..models.result import AggregatedOutcome
from .human import render_human
from .payload import build_payload, dumps


class ReportFormatter:
    def __init__(self, options: AnalysisOptions):
        self.options = options

    def render(self, outcome: AggregatedOutcome) -> RenderedReport:
        payload = build_payload(outcome)
        if self.options.machine_readable:
            return RenderedReport(text=dumps(payload), payload=payload)
        return RenderedReport(text=render_human(outcome, self.options), payload=payload)

    def render_error(self, error: SnykError) -> RenderedReport:
        payload = {"ok": False, "error": error.to_dict()}
        if self.options.machine_readable:
            return RenderedReport(text=dumps(payload), payload=payload)
        return RenderedReport(text=error.user_message or error.message, payload=payload)


__all__ = ["ReportFormatter"]
