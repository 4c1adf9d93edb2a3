# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Retry helper for HttpClient implementations."""

from __future__ import annotations

import asyncio
import logging

from ..config import load_http_settings
from .client import HttpClient
from .models import HttpRequest, HttpResponse, RetryConfig

logger = logging.getLogger(__name__)


def build_default_retry_config() -> RetryConfig:
    """Create a RetryConfig from environment-backed HttpSettings."""
    return RetryConfig.from_settings(load_http_settings())


async def send_with_retries(
    client: HttpClient,
    request: HttpRequest,
    *,
    retry_config: RetryConfig | None = None,
) -> HttpResponse:
    """Execute a request with basic retry/backoff semantics."""
    cfg = retry_config or build_default_retry_config()

    attempt = 0
    delay = cfg.initial_delay
    last_response: HttpResponse | None = None

    while attempt < cfg.max_attempts:
        try:
            response = await client.request(request)
        except Exception as exc:  # noqa: BLE001
            response = HttpResponse(
                ok=False,
                error_message=str(exc),
                error_type=exc.__class__.__name__,
            )
        last_response = response

        if response.ok:
            if attempt:
                response.meta["retry_count"] = attempt
            return response

        # HTTP error statuses are answers from the backend, not transport failures.
        if response.status_code is not None:
            if attempt:
                response.meta.setdefault("retry_count", attempt)
            return response

        attempt += 1
        if attempt >= cfg.max_attempts:
            break
        logger.debug("Retrying %s %s after %s (attempt %d)", request.method, request.url, response.error_type, attempt)
        await asyncio.sleep(delay)
        delay *= cfg.backoff_factor

    if last_response is not None:
        last_response.meta.setdefault("retry_count", attempt)
        last_response.meta.setdefault("retry_exhausted", True)
        return last_response

    return HttpResponse(ok=False, error_message="Retry budget exhausted", meta={"retry_count": attempt, "retry_exhausted": True})
