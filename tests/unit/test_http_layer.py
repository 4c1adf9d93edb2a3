# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import asyncio

import httpx
import pytest

from snyktest.config import HttpSettings
from snyktest.http.adapters import StubHttpClient
from snyktest.http.client import create_default_http_client
from snyktest.http.httpx_client import HttpxClient
from snyktest.http.models import HttpRequest, HttpResponse, RetryConfig
from snyktest.http.retry import build_default_retry_config, send_with_retries


class SequenceHttpClient:
    def __init__(self, responses):
        self._responses = list(responses)
        self.calls = 0

    async def request(self, request: HttpRequest) -> HttpResponse:  # noqa: ARG002
        self.calls += 1
        return self._responses[min(self.calls - 1, len(self._responses) - 1)]

    async def aclose(self) -> None:  # pragma: no cover
        self.closed = True


class RaisingHttpClient:
    def __init__(self):
        self.calls = 0

    async def request(self, request: HttpRequest) -> HttpResponse:  # noqa: ARG002
        self.calls += 1
        raise RuntimeError("socket closed")


@pytest.fixture
def no_sleep(monkeypatch):
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)
    return delays


def test_http_response_json_helpers():
    resp = HttpResponse.from_json({"ok": True}, status_code=201, url="http://x")
    assert resp.ok is True
    assert resp.json() == {"ok": True}
    assert resp.headers["content-type"] == "application/json"
    assert HttpResponse.from_json({}, status_code=404).ok is False

    with pytest.raises(ValueError):
        HttpResponse(ok=True, status_code=204).json()
    with pytest.raises(ValueError):
        HttpResponse(ok=True, status_code=200, text="<html>").json()


def test_retry_config_from_settings_clamps_minimum():
    settings = HttpSettings(max_retries=0)
    retry = RetryConfig.from_settings(settings)
    assert retry.max_attempts == 1
    assert retry.backoff_factor == settings.backoff_factor


def test_build_default_retry_config_reads_env(monkeypatch):
    monkeypatch.setenv("SNYK_HTTP_RETRIES", "4")
    monkeypatch.setenv("SNYK_HTTP_INITIAL_DELAY", "0.25")
    retry = build_default_retry_config()
    assert retry.max_attempts == 4
    assert retry.initial_delay == 0.25


@pytest.mark.asyncio
async def test_send_with_retries_success_after_retry(no_sleep):
    client = SequenceHttpClient([HttpResponse(ok=False, error_message="timeout"), HttpResponse(ok=True, status_code=200, text="done")])
    result = await send_with_retries(client, HttpRequest(url="http://example"), retry_config=RetryConfig(max_attempts=3, initial_delay=0.5))
    assert result.ok is True
    assert result.meta["retry_count"] == 1
    assert client.calls == 2
    assert no_sleep == [0.5]


@pytest.mark.asyncio
async def test_send_with_retries_backs_off_until_exhausted(no_sleep):
    client = SequenceHttpClient([HttpResponse(ok=False, error_message="blocked")])
    cfg = RetryConfig(max_attempts=3, backoff_factor=2.0, initial_delay=1.0)
    result = await send_with_retries(client, HttpRequest(url="http://example"), retry_config=cfg)
    assert result.ok is False
    assert client.calls == 3
    assert no_sleep == [1.0, 2.0]
    assert result.meta["retry_exhausted"] is True


@pytest.mark.asyncio
async def test_send_with_retries_does_not_retry_status_code_failures(no_sleep):
    client = SequenceHttpClient([HttpResponse(ok=False, status_code=500, error_message="boom"), HttpResponse(ok=True)])
    result = await send_with_retries(client, HttpRequest(url="http://example"), retry_config=RetryConfig(max_attempts=3))
    assert result.status_code == 500
    assert client.calls == 1
    assert no_sleep == []


@pytest.mark.asyncio
async def test_send_with_retries_converts_client_exceptions(no_sleep):
    client = RaisingHttpClient()
    result = await send_with_retries(client, HttpRequest(url="http://example"), retry_config=RetryConfig(max_attempts=2))
    assert result.ok is False
    assert result.error_type == "RuntimeError"
    assert result.error_message == "socket closed"
    assert client.calls == 2


@pytest.mark.asyncio
async def test_stub_http_client_lookup_order():
    stub = StubHttpClient({"http://x/a": HttpResponse.from_json({"any": True})})
    stub.add("http://x/a", HttpResponse.from_json({"post": True}), method="post")

    got = await stub.request(HttpRequest(url="http://x/a"))
    assert got.json() == {"any": True}
    got = await stub.request(HttpRequest(url="http://x/a", method="POST"))
    assert got.json() == {"post": True}

    missing = await stub.request(HttpRequest(url="http://x/b"))
    assert missing.ok is False
    assert missing.status_code is None
    assert [request.url for request in stub.requests] == ["http://x/a", "http://x/a", "http://x/b"]

    await stub.aclose()
    assert stub.closed is True


@pytest.mark.asyncio
async def test_httpx_client_maps_responses_and_failures():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/boom":
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(418, headers={"X-Thing": "1"}, json={"teapot": True})

    settings = HttpSettings(user_agent="snyktest-tests")
    client = HttpxClient(settings, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

    resp = await client.request(HttpRequest(url="http://example.test/tea", params={"org": "acme"}, headers={"Authorization": "token t"}))
    assert resp.ok is False
    assert resp.status_code == 418
    assert resp.headers["x-thing"] == "1"
    assert resp.json() == {"teapot": True}
    assert seen[0].headers["user-agent"] == "snyktest-tests"
    assert seen[0].headers["authorization"] == "token t"
    assert seen[0].url.params["org"] == "acme"

    failed = await client.request(HttpRequest(url="http://example.test/boom"))
    assert failed.ok is False
    assert failed.status_code is None
    assert failed.error_type == "ConnectError"

    await client.aclose()


@pytest.mark.asyncio
async def test_create_default_http_client_uses_settings():
    client = create_default_http_client(HttpSettings(timeout=3.0))
    assert isinstance(client, HttpxClient)
    assert client.settings.timeout == 3.0
    await client.aclose()
