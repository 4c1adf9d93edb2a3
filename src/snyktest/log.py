# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for snyktest."""

from __future__ import annotations

import logging
import os

DEFAULT_LOG_LEVEL = "WARNING"
PACKAGE_LOGGER = "snyktest"


def resolve_log_level(level: str | None = None) -> int:
    """An explicit `level` (the CLI's `--debug`) wins over `SNYK_LOG_LEVEL`."""
    name = (level or os.getenv("SNYK_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, name, logging.WARNING)


def setup_logging(level: str | None = None) -> None:
    """Configure standard logging for CLI/library use."""
    effective_level = resolve_log_level(level)
    logging.basicConfig(level=effective_level, format="%(levelname)s %(name)s: %(message)s")
    # basicConfig is a no-op once the root logger has handlers.
    logging.getLogger(PACKAGE_LOGGER).setLevel(effective_level)


__all__ = ["resolve_log_level", "setup_logging"]
