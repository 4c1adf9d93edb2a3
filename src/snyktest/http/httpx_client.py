# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed HttpClient implementation."""

from __future__ import annotations

import httpx

from ..config import HttpSettings, load_http_settings
from .client import HttpClient
from .models import HttpRequest, HttpResponse


class HttpxClient(HttpClient):
    """Asynchronous httpx client wrapper."""

    def __init__(self, settings: HttpSettings | None = None, client: httpx.AsyncClient | None = None):
        self.settings = settings or load_http_settings()
        self._client = client or httpx.AsyncClient(
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
        )

    async def request(self, request: HttpRequest) -> HttpResponse:
        headers = dict(request.headers or {})
        headers.setdefault("User-Agent", self.settings.user_agent)
        timeout = request.timeout if request.timeout is not None else self.settings.timeout

        try:
            resp = await self._client.request(
                request.method,
                request.url,
                headers=headers,
                params=request.params,
                json=request.json_body,
                timeout=timeout,
            )
        except Exception as exc:  # noqa: BLE001
            return HttpResponse(
                ok=False,
                error_message=str(exc),
                error_type=type(exc).__name__,
            )

        return HttpResponse(
            ok=resp.is_success,
            status_code=resp.status_code,
            headers={key.lower(): value for key, value in resp.headers.items()},
            text=resp.text,
            url=str(resp.url),
        )

    async def aclose(self) -> None:
        await self._client.aclose()
