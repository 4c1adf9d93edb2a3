# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Map an aggregated result (or an upstream error) to exactly one terminal outcome."""

from __future__ import annotations

from .errors import SnykError
from .formatting.formatter import ReportFormatter
from .models.outcome import Failure, Success, TerminalOutcome, VulnerabilitiesFound
from .models.result import AggregatedOutcome


def _first_error(result: AggregatedOutcome) -> SnykError | None:
    return next((item.error for item in result.results if item.error is not None), None)


def classify(result: AggregatedOutcome | SnykError, formatter: ReportFormatter) -> TerminalOutcome:
    """
    Vulnerable targets win over failed ones; a failed target with no
    vulnerable sibling fails the whole run.
    """
    if isinstance(result, SnykError):
        return Failure(error=result, report=formatter.render_error(result))
    report = formatter.render(result)
    if result.vulnerable_projects > 0:
        return VulnerabilitiesFound(outcome=result, report=report)
    error = _first_error(result)
    if error is not None:
        return Failure(error=error, report=report, outcome=result)
    return Success(outcome=result, report=report)


__all__ = ["classify"]
