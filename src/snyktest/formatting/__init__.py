# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Report rendering."""

from .formatter import ReportFormatter
from .human import DEV_DEPS_TIP, render_human
from .payload import build_payload

__all__ = ["DEV_DEPS_TIP", "ReportFormatter", "build_payload", "render_human"]
