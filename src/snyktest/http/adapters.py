# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-memory HttpClient used by tests and offline runs."""

from __future__ import annotations

from .client import HttpClient
from .models import HttpRequest, HttpResponse


class StubHttpClient(HttpClient):
    """
    Deterministic, programmable HttpClient.

    Responses are looked up by `(METHOD, url)` first, then by bare `url`.
    Query parameters are not part of the key.
    """

    def __init__(self, responses: dict[str | tuple[str, str], HttpResponse] | None = None):
        self._responses = dict(responses or {})
        self.requests: list[HttpRequest] = []
        self.closed = False

    def add(self, url: str, response: HttpResponse, *, method: str | None = None) -> None:
        key: str | tuple[str, str] = (method.upper(), url) if method else url
        self._responses[key] = response

    async def request(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        for key in ((request.method.upper(), request.url), request.url):
            if key in self._responses:
                return self._responses[key]
        return HttpResponse(ok=False, status_code=None, error_message="No stubbed response configured")

    async def aclose(self) -> None:
        self.closed = True
