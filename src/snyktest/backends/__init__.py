# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Backend service clients (transport collaborators)."""

from .code_client import AnalysisSeverity, CodeClient, HttpCodeClient
from .flags import FeatureFlagClient, FeatureFlagLookup
from .vuln_client import HttpVulnClient, VulnLookup

__all__ = [
    "AnalysisSeverity",
    "CodeClient",
    "FeatureFlagClient",
    "FeatureFlagLookup",
    "HttpCodeClient",
    "HttpVulnClient",
    "VulnLookup",
]
