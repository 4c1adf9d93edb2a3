# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Per-invocation session context.

A SessionContext is built once from the user configuration when a test run
starts and handed explicitly to every component that talks to the backend.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urlsplit, urlunsplit

from .config import DEFAULT_API_ENDPOINT, UserConfig, load_user_config

_CODE_HOST_RE = re.compile(r"^(?:app\.|api\.)?")


@dataclass(frozen=True)
class SessionContext:
    api_token: str | None = None
    endpoint: str = DEFAULT_API_ENDPOINT
    org: str | None = None
    code_url: str | None = None

    @classmethod
    def from_user_config(cls, config: UserConfig, *, org: str | None = None) -> "SessionContext":
        return cls(
            api_token=config.api,
            endpoint=config.endpoint or DEFAULT_API_ENDPOINT,
            org=org or config.org,
        )

    @property
    def api_url(self) -> str:
        return self.endpoint.rstrip("/")

    @property
    def root_url(self) -> str:
        """Scheme and host of the endpoint, as shown to users in auth errors."""
        parts = urlsplit(self.api_url)
        if not parts.scheme or not parts.netloc:
            return self.api_url
        return urlunsplit((parts.scheme, parts.netloc, "", "", ""))

    @property
    def code_base_url(self) -> str:
        if self.code_url:
            return self.code_url.rstrip("/")
        parts = urlsplit(self.api_url)
        if not parts.scheme or not parts.netloc:
            return self.api_url
        host = _CODE_HOST_RE.sub("deeproxy.", parts.netloc.lower(), count=1)
        return urlunsplit((parts.scheme, host, "", "", ""))

    def auth_headers(self) -> dict[str, str]:
        if not self.api_token:
            return {}
        return {"Authorization": f"token {self.api_token}"}


def load_session(*, org: str | None = None) -> SessionContext:
    """Build a session from the persisted config and environment."""
    return SessionContext.from_user_config(load_user_config(), org=org)


__all__ = ["SessionContext", "load_session"]
