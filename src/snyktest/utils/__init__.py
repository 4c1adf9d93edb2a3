# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Shared utilities."""

from .concurrency import map_bounded

__all__ = ["map_bounded"]
