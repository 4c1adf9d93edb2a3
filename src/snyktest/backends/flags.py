# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Feature-flag lookups against the CLI config endpoint."""

from __future__ import annotations

from typing import Any, Protocol
from urllib.parse import quote

from ..errors import BackendError
from ..http.client import HttpClient
from ..http.models import HttpRequest
from ..http.retry import send_with_retries
from ..session import SessionContext
from .common import json_body


class FeatureFlagLookup(Protocol):
    async def is_feature_flag_supported_for_org(self, flag: str, org: str | None = None) -> dict[str, Any]: ...


class FeatureFlagClient:
    """
    Reads `/cli-config/feature-flags/<flag>` for the session's organization.

    Non-2xx answers are returned as `{"ok": False, "code": <status>, ...}` so
    the gate can decide how to report them; transport failures raise.
    """

    def __init__(self, http_client: HttpClient, session: SessionContext):
        self.http_client = http_client
        self.session = session

    async def is_feature_flag_supported_for_org(self, flag: str, org: str | None = None) -> dict[str, Any]:
        org = org or self.session.org
        request = HttpRequest(
            url=f"{self.session.api_url}/cli-config/feature-flags/{quote(flag, safe='')}",
            headers=self.session.auth_headers(),
            params={"org": org} if org else None,
        )
        response = await send_with_retries(self.http_client, request)
        if response.status_code is None:
            raise BackendError(response.error_message or "Failed to check feature flag")

        body = json_body(response)
        if not response.ok:
            return {
                "ok": False,
                "code": response.status_code,
                "message": body.get("message") or body.get("error"),
                "userMessage": body.get("userMessage"),
            }
        return body


__all__ = ["FeatureFlagClient", "FeatureFlagLookup"]
