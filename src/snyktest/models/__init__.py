# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for snyktest."""

from .finding import NormalizedFinding
from .options import AnalysisMode, AnalysisOptions, Severity, ShowVulnPaths
from .outcome import Failure, RenderedReport, Success, TerminalOutcome, VulnerabilitiesFound
from .result import AggregatedOutcome, PerTargetResult
from .target import TargetKind, TestTarget

__all__ = [
    "AggregatedOutcome",
    "AnalysisMode",
    "AnalysisOptions",
    "Failure",
    "NormalizedFinding",
    "PerTargetResult",
    "RenderedReport",
    "Severity",
    "ShowVulnPaths",
    "Success",
    "TargetKind",
    "TerminalOutcome",
    "TestTarget",
    "VulnerabilitiesFound",
]
