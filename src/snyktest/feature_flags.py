# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Organization entitlement checks run before any analysis call."""

from __future__ import annotations

import logging
from enum import Enum

from .backends.flags import FeatureFlagLookup
from .config import TestSettings
from .errors import (
    AuthenticationError,
    BackendError,
    FeatureNotEntitledError,
    InvalidArgumentError,
)
from .models.options import AnalysisMode
from .session import SessionContext

logger = logging.getLogger(__name__)

CODE_ANALYSIS_FLAG = TestSettings.code_analysis_flag
DEPENDENCY_TEST_FLAG = TestSettings.dependency_test_flag

MODE_FEATURES: dict[AnalysisMode, str] = {
    AnalysisMode.CODE: "Snyk Code",
    AnalysisMode.DEPENDENCY: "Snyk Open Source",
}


class FlagStatus(str, Enum):
    ENTITLED = "entitled"
    DENIED = "denied"


class FeatureFlagGate:
    """
    Resolves whether the session's organization may use a capability.

    Authentication failures raise AuthenticationError; exceptions raised by the
    lookup itself propagate untouched.
    """

    def __init__(self, lookup: FeatureFlagLookup, session: SessionContext, settings: TestSettings | None = None):
        self.lookup = lookup
        self.session = session
        settings = settings or TestSettings()
        self.mode_flags: dict[AnalysisMode, str] = {
            AnalysisMode.CODE: settings.code_analysis_flag,
            AnalysisMode.DEPENDENCY: settings.dependency_test_flag,
        }

    async def check_flag(self, flag: str, org: str | None = None) -> FlagStatus:
        org = org or self.session.org
        response = await self.lookup.is_feature_flag_supported_for_org(flag, org)
        code = response.get("code")
        logger.debug("Feature flag %s for org %s: %s", flag, org or "<default>", response)

        if code in (401, 403):
            raise AuthenticationError(self.session.root_url, code=code)
        if response.get("ok"):
            return FlagStatus.ENTITLED
        if response.get("userMessage"):
            raise InvalidArgumentError(str(response["userMessage"]))
        if code is not None:
            message = response.get("message") or f"Failed to check feature flag {flag}"
            raise BackendError(str(message), code=code)
        return FlagStatus.DENIED

    async def ensure_entitled(self, flag: str, feature: str, *, org: str | None = None) -> None:
        if await self.check_flag(flag, org) is FlagStatus.DENIED:
            raise FeatureNotEntitledError(feature, org or self.session.org)

    async def ensure_mode_entitled(self, mode: AnalysisMode, *, org: str | None = None) -> None:
        await self.ensure_entitled(self.mode_flags[mode], MODE_FEATURES[mode], org=org)


__all__ = [
    "CODE_ANALYSIS_FLAG",
    "DEPENDENCY_TEST_FLAG",
    "FeatureFlagGate",
    "FlagStatus",
]
