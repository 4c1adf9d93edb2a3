# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Terminal outcomes of a test run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from ..errors import VULNS_CODE, SnykError, VulnerabilitiesFoundSignal
from .result import AggregatedOutcome

EXIT_SUCCESS = 0
EXIT_VULNS_FOUND = 1
EXIT_FAILURE = 2


@dataclass(frozen=True)
class RenderedReport:
    """`text` is what the caller prints; `payload` is the machine-readable form."""

    text: str
    payload: Any


@dataclass(frozen=True)
class Success:
    outcome: AggregatedOutcome
    report: RenderedReport

    exit_code = EXIT_SUCCESS

    @property
    def message(self) -> str:
        return self.report.text.strip()

    def raise_for_outcome(self) -> str:
        return self.report.text


@dataclass(frozen=True)
class VulnerabilitiesFound:
    outcome: AggregatedOutcome
    report: RenderedReport

    code = VULNS_CODE
    exit_code = EXIT_VULNS_FOUND

    @property
    def message(self) -> str:
        return self.report.text.strip()

    def raise_for_outcome(self) -> str:
        raise VulnerabilitiesFoundSignal(self.message, code=VULNS_CODE)


@dataclass(frozen=True)
class Failure:
    """
    `report` is the rendered error, or the combined report when some targets
    were tested before others failed; `outcome` is set only in the latter case.
    """

    error: SnykError
    report: RenderedReport | None = None
    outcome: AggregatedOutcome | None = None

    exit_code = EXIT_FAILURE


    @property
    def kind(self) -> str:
        return self.error.kind

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def user_message(self) -> str | None:
        return self.error.user_message

    @property
    def code(self) -> int | str | None:
        return self.error.code

    def raise_for_outcome(self) -> str:
        raise self.error


TerminalOutcome = Union[Success, VulnerabilitiesFound, Failure]

__all__ = [
    "EXIT_FAILURE",
    "EXIT_SUCCESS",
    "EXIT_VULNS_FOUND",
    "Failure",
    "RenderedReport",
    "Success",
    "TerminalOutcome",
    "VulnerabilitiesFound",
]
