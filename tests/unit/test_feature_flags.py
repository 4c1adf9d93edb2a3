# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import pytest

from snyktest.backends.flags import FeatureFlagClient
from snyktest.config import TestSettings
from snyktest.errors import (
    AuthenticationError,
    BackendError,
    FeatureNotEntitledError,
    InvalidArgumentError,
)
from snyktest.feature_flags import CODE_ANALYSIS_FLAG, DEPENDENCY_TEST_FLAG, FeatureFlagGate, FlagStatus
from snyktest.http.adapters import StubHttpClient
from snyktest.http.models import HttpResponse
from snyktest.models.options import AnalysisMode

API = "http://localhost:12345/api"


class FakeLookup:
    def __init__(self, response=None, exc=None):
        self.response = response or {}
        self.exc = exc
        self.calls = []

    async def is_feature_flag_supported_for_org(self, flag, org=None):
        self.calls.append((flag, org))
        if self.exc is not None:
            raise self.exc
        return self.response


@pytest.mark.asyncio
async def test_flag_client_hits_feature_flag_endpoint(session):
    url = f"{API}/cli-config/feature-flags/{CODE_ANALYSIS_FLAG}"
    stub = StubHttpClient({url: HttpResponse.from_json({"ok": True})})
    client = FeatureFlagClient(stub, session)

    assert await client.is_feature_flag_supported_for_org(CODE_ANALYSIS_FLAG) == {"ok": True}
    request = stub.requests[0]
    assert request.params == {"org": "test-org"}
    assert request.headers == {"Authorization": "token 123456789"}


@pytest.mark.asyncio
async def test_flag_client_returns_status_for_http_errors(session):
    url = f"{API}/cli-config/feature-flags/{CODE_ANALYSIS_FLAG}"
    stub = StubHttpClient({url: HttpResponse.from_json({"message": "Unauthorized"}, status_code=401)})
    response = await FeatureFlagClient(stub, session).is_feature_flag_supported_for_org(CODE_ANALYSIS_FLAG, "other")
    assert response["ok"] is False
    assert response["code"] == 401
    assert response["message"] == "Unauthorized"
    assert stub.requests[0].params == {"org": "other"}


@pytest.mark.asyncio
async def test_flag_client_raises_on_transport_failure(session):
    client = FeatureFlagClient(StubHttpClient(), session)
    with pytest.raises(BackendError, match="No stubbed response configured"):
        await client.is_feature_flag_supported_for_org(CODE_ANALYSIS_FLAG)


@pytest.mark.asyncio
async def test_gate_entitled_and_denied(session):
    gate = FeatureFlagGate(FakeLookup({"ok": True}), session)
    assert await gate.check_flag(CODE_ANALYSIS_FLAG) is FlagStatus.ENTITLED

    denied = FakeLookup({"ok": False})
    gate = FeatureFlagGate(denied, session)
    assert await gate.check_flag(CODE_ANALYSIS_FLAG) is FlagStatus.DENIED
    assert denied.calls == [(CODE_ANALYSIS_FLAG, "test-org")]


@pytest.mark.asyncio
async def test_gate_maps_unauthorized_to_authentication_error(session):
    gate = FeatureFlagGate(FakeLookup({"code": 401}), session)
    with pytest.raises(AuthenticationError) as excinfo:
        await gate.check_flag(CODE_ANALYSIS_FLAG)
    assert excinfo.value.message == "Authentication failed. Please check the API token on http://localhost:12345"


@pytest.mark.asyncio
async def test_gate_lookup_rejection_propagates_verbatim(session):
    rejection = BackendError("Invalid auth token", code=401)
    gate = FeatureFlagGate(FakeLookup(exc=rejection), session)
    with pytest.raises(BackendError) as excinfo:
        await gate.check_flag(CODE_ANALYSIS_FLAG)
    assert excinfo.value is rejection


@pytest.mark.asyncio
async def test_gate_user_message_and_other_codes(session):
    gate = FeatureFlagGate(FakeLookup({"ok": False, "userMessage": "Org is locked"}), session)
    with pytest.raises(InvalidArgumentError, match="Org is locked"):
        await gate.check_flag(CODE_ANALYSIS_FLAG)

    gate = FeatureFlagGate(FakeLookup({"ok": False, "code": 500, "message": "Server exploded"}), session)
    with pytest.raises(BackendError) as excinfo:
        await gate.check_flag(CODE_ANALYSIS_FLAG)
    assert excinfo.value.code == 500
    assert excinfo.value.message == "Server exploded"


@pytest.mark.asyncio
async def test_ensure_mode_entitled_uses_mode_flag(session):
    lookup = FakeLookup({"ok": False})
    gate = FeatureFlagGate(lookup, session)

    with pytest.raises(FeatureNotEntitledError) as excinfo:
        await gate.ensure_mode_entitled(AnalysisMode.CODE, org="acme")
    assert excinfo.value.message == "Snyk Code is not supported for org acme."

    with pytest.raises(FeatureNotEntitledError) as excinfo:
        await gate.ensure_mode_entitled(AnalysisMode.DEPENDENCY)
    assert excinfo.value.message == "Snyk Open Source is not supported for org test-org."

    assert lookup.calls == [(CODE_ANALYSIS_FLAG, "acme"), (DEPENDENCY_TEST_FLAG, "test-org")]


@pytest.mark.asyncio
async def test_mode_flags_come_from_settings(session, monkeypatch):
    monkeypatch.setenv("SNYK_DEPENDENCY_TEST_FLAG", "openSourceEnabled")
    settings = TestSettings.from_env()
    assert settings.dependency_test_flag == "openSourceEnabled"
    assert settings.code_analysis_flag == CODE_ANALYSIS_FLAG

    lookup = FakeLookup({"ok": True})
    gate = FeatureFlagGate(lookup, session, settings)
    await gate.ensure_mode_entitled(AnalysisMode.DEPENDENCY)
    await gate.ensure_mode_entitled(AnalysisMode.CODE)

    assert lookup.calls == [("openSourceEnabled", "test-org"), (CODE_ANALYSIS_FLAG, "test-org")]
