# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dependency vulnerability testing mode."""

from .runner import DependencyTestRunner, normalize_vulnerabilities

__all__ = ["DependencyTestRunner", "normalize_vulnerabilities"]
