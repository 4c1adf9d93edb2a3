# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Static code analysis mode."""

from .analysis import (
    CodeAnalysisAdapter,
    get_code_analysis_and_parse_results,
    parse_security_results,
    sarif_to_findings,
)

__all__ = [
    "CodeAnalysisAdapter",
    "get_code_analysis_and_parse_results",
    "parse_security_results",
    "sarif_to_findings",
]
