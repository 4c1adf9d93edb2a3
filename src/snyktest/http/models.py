# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models used across snyktest."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from ..config import HttpSettings

Headers = dict[str, str]


@dataclass
class HttpRequest:
    """Normalized request representation consumed by HttpClient implementations."""

    url: str
    method: str = "GET"
    headers: Headers | None = None
    params: dict[str, str] | None = None
    json_body: Any = None
    timeout: float | None = None


@dataclass
class HttpResponse:
    """Normalized HTTP response; `ok` is False for transport failures and non-2xx statuses."""

    ok: bool
    status_code: int | None = None
    headers: Headers = field(default_factory=dict)
    text: str = ""
    url: str | None = None
    error_message: str | None = None
    error_type: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    def json(self) -> Any:
        """Decode the body as JSON; raises ValueError for empty or invalid bodies."""
        if not self.text:
            raise ValueError("Empty response body")
        return json.loads(self.text)

    @classmethod
    def from_json(cls, data: Any, *, status_code: int = 200, url: str | None = None) -> HttpResponse:
        """Build a response carrying `data` as its JSON body (used by stubs and fixtures)."""
        return cls(
            ok=200 <= status_code < 300,
            status_code=status_code,
            headers={"content-type": "application/json"},
            text=json.dumps(data),
            url=url,
        )


@dataclass
class RetryConfig:
    """Retry policy for HTTP requests derived from HttpSettings."""

    max_attempts: int = 2
    backoff_factor: float = 2.0
    initial_delay: float = 1.0

    @classmethod
    def from_settings(cls, settings: HttpSettings) -> RetryConfig:
        """Build a retry config from the shared HttpSettings."""
        return cls(
            max_attempts=max(1, settings.max_retries),
            backoff_factor=settings.backoff_factor,
            initial_delay=settings.initial_delay,
        )
