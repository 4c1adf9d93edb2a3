# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
snyktest package entrypoint.

This package orchestrates vulnerability tests across ecosystems: dependency
tests for package specifiers and project manifests, and static code analysis
delivered as SARIF. Backend access is abstracted behind an injectable async
HTTP client, and domain objects are modeled with typed dataclasses.
"""

from .aggregate import aggregate, summary_line
from .classify import classify
from .code import CodeAnalysisAdapter, get_code_analysis_and_parse_results
from .config import HttpSettings, TestSettings, UserConfig, load_http_settings, load_user_config
from .dependency import DependencyTestRunner
from .ecosystems import SUPPORTED_ECOSYSTEMS, EcosystemDispatcher, build_dispatcher
from .errors import (
    VULNS_CODE,
    AuthenticationError,
    BackendError,
    FeatureNotEntitledError,
    InvalidArgumentError,
    NotFoundError,
    SnykError,
    UnsupportedEcosystemError,
    VulnerabilitiesFoundSignal,
)
from .feature_flags import FeatureFlagGate, FlagStatus
from .formatting import ReportFormatter
from .http import HttpClient, HttpRequest, HttpResponse, HttpxClient, RetryConfig, StubHttpClient, create_default_http_client
from .log import setup_logging
from .models import (
    AggregatedOutcome,
    AnalysisMode,
    AnalysisOptions,
    Failure,
    NormalizedFinding,
    PerTargetResult,
    Severity,
    ShowVulnPaths,
    Success,
    TerminalOutcome,
    TestTarget,
    VulnerabilitiesFound,
)
from .runtime import SnykTest
from .session import SessionContext, load_session
from .version import __version__

__all__ = [
    "AggregatedOutcome",
    "AnalysisMode",
    "AnalysisOptions",
    "AuthenticationError",
    "BackendError",
    "CodeAnalysisAdapter",
    "DependencyTestRunner",
    "EcosystemDispatcher",
    "Failure",
    "FeatureFlagGate",
    "FeatureNotEntitledError",
    "FlagStatus",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "HttpxClient",
    "InvalidArgumentError",
    "NormalizedFinding",
    "NotFoundError",
    "PerTargetResult",
    "ReportFormatter",
    "RetryConfig",
    "SUPPORTED_ECOSYSTEMS",
    "SessionContext",
    "Severity",
    "ShowVulnPaths",
    "SnykError",
    "SnykTest",
    "StubHttpClient",
    "Success",
    "TerminalOutcome",
    "TestSettings",
    "TestTarget",
    "UnsupportedEcosystemError",
    "UserConfig",
    "VULNS_CODE",
    "VulnerabilitiesFound",
    "VulnerabilitiesFoundSignal",
    "__version__",
    "aggregate",
    "build_dispatcher",
    "classify",
    "create_default_http_client",
    "get_code_analysis_and_parse_results",
    "load_http_settings",
    "load_session",
    "load_user_config",
    "setup_logging",
    "summary_line",
]
