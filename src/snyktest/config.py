# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for snyktest."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .version import __version__

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = f"snyktest/{__version__} (+https://snyk.io)"
DEFAULT_API_ENDPOINT = "https://snyk.io/api"
DEFAULT_CONFIG_FILE = Path("~/.config/configstore/snyk.json")


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class HttpSettings:
    """HTTP client defaults."""

    timeout: float = 30.0
    max_retries: int = 2
    backoff_factor: float = 2.0
    initial_delay: float = 1.0
    user_agent: str = DEFAULT_USER_AGENT
    verify_ssl: bool = True

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        return cls(
            timeout=_float_env("SNYK_HTTP_TIMEOUT", cls.timeout),
            max_retries=_int_env("SNYK_HTTP_RETRIES", cls.max_retries),
            backoff_factor=_float_env("SNYK_HTTP_BACKOFF", cls.backoff_factor),
            initial_delay=_float_env("SNYK_HTTP_INITIAL_DELAY", cls.initial_delay),
            user_agent=os.getenv("SNYK_USER_AGENT", cls.user_agent),
            verify_ssl=_bool_env("SNYK_HTTP_VERIFY_SSL", cls.verify_ssl),
        )


@dataclass
class TestSettings:
    """Per-invocation test pipeline knobs."""

    __test__ = False  # not a pytest class

    concurrency: int = 5
    # Organization feature flags that gate each mode.
    code_analysis_flag: str = "sastEnabled"
    dependency_test_flag: str = "cliDependencyTest"

    @classmethod
    def from_env(cls) -> "TestSettings":
        return cls(
            concurrency=max(1, _int_env("SNYK_TEST_CONCURRENCY", cls.concurrency)),
            code_analysis_flag=os.getenv("SNYK_CODE_ANALYSIS_FLAG") or cls.code_analysis_flag,
            dependency_test_flag=os.getenv("SNYK_DEPENDENCY_TEST_FLAG") or cls.dependency_test_flag,
        )


@dataclass(frozen=True)
class UserConfig:
    """
    Read-only view of the persisted user configuration.

    Only `api` (token) and `endpoint` feed the pipeline; `org` is the default
    organization used when the caller does not pass one.
    """

    api: str | None = None
    endpoint: str | None = None
    org: str | None = None


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        with path.expanduser().open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.debug("Ignoring unreadable config file %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()


def load_test_settings() -> TestSettings:
    return TestSettings.from_env()


def load_user_config(path: str | Path | None = None) -> UserConfig:
    """
    Load the user config file, then apply environment overrides.

    `SNYK_TOKEN`, `SNYK_API` and `SNYK_CFG_ORG` win over the file values.
    """
    config_path = Path(path or os.getenv("SNYK_CONFIG_FILE") or DEFAULT_CONFIG_FILE)
    stored = _read_config_file(config_path)
    return UserConfig(
        api=os.getenv("SNYK_TOKEN") or stored.get("api"),
        endpoint=os.getenv("SNYK_API") or stored.get("endpoint"),
        org=os.getenv("SNYK_CFG_ORG") or stored.get("org"),
    )


__all__ = [
    "DEFAULT_API_ENDPOINT",
    "DEFAULT_USER_AGENT",
    "HttpSettings",
    "TestSettings",
    "UserConfig",
    "load_http_settings",
    "load_test_settings",
    "load_user_config",
]
