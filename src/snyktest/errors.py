# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .http.models import HttpResponse
    from .session import SessionContext

VULNS_CODE = "VULNS"


class SnykError(Exception):
    """
    Base error with the three fields consumers assert on.

    `message` is the developer-facing text (and `str(err)`), `user_message` the
    text shown to CLI users, and `code` the backend status or error tag.
    """

    default_message = "An unknown error occurred"
    default_code: int | str | None = None
    default_user_message: str | None = None

    def __init__(
        self,
        message: str | None = None,
        *,
        code: int | str | None = None,
        user_message: str | None = None,
    ):
        self.message = message if message is not None else self.default_message
        self.code = code if code is not None else self.default_code
        self.user_message = user_message if user_message is not None else self.default_user_message
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SnykError):
            return NotImplemented
        return (type(self), self.message, self.code, self.user_message) == (
            type(other),
            other.message,
            other.code,
            other.user_message,
        )

    __hash__ = Exception.__hash__

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message,
            "code": self.code,
            "userMessage": self.user_message,
        }


class AuthenticationError(SnykError):
    default_code = 401

    def __init__(self, root_url: str, *, code: int | None = None):
        message = f"Authentication failed. Please check the API token on {root_url}"
        super().__init__(message, code=code, user_message=message)


class NotFoundError(SnykError):
    default_message = "Failed to get vulns for package."
    default_code = 404
    default_user_message = "Failed to get vulnerabilities. Are you sure this is a package?"


class InvalidArgumentError(SnykError):
    default_code = 422

    def __init__(self, message: str, *, code: int | None = None):
        super().__init__(message, code=code, user_message=message)


class UnsupportedEcosystemError(SnykError):
    default_code = 422

    def __init__(self, ecosystem: str):
        message = f"Unsupported ecosystem: {ecosystem}"
        super().__init__(message, user_message=message)
        self.ecosystem = ecosystem


class FeatureNotEntitledError(SnykError):
    default_code = 403

    def __init__(self, feature: str, org: str | None = None):
        org_text = f" {org}" if org else ""
        message = f"{feature} is not supported for org{org_text}."
        super().__init__(message, user_message=message)
        self.feature = feature


class BackendError(SnykError):
    """Any other failure reported by the transport or the backend."""


class VulnerabilitiesFoundSignal(SnykError):
    """
    Raised only at the caller boundary when a scan completed with findings.

    Never used inside the pipeline; see TerminalOutcome.raise_for_outcome().
    """

    default_code = VULNS_CODE


def _body_field(response: HttpResponse, key: str) -> str | None:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and isinstance(data.get(key), str):
        return data[key]
    return None


def error_from_response(
    response: HttpResponse,
    *,
    session: SessionContext,
    not_found: SnykError | None = None,
) -> SnykError:
    """Map a failed transport response onto the error taxonomy."""
    status = response.status_code
    if status == 401:
        return AuthenticationError(session.root_url)
    if status == 404 and not_found is not None:
        return not_found
    message = _body_field(response, "message") or _body_field(response, "error") or response.error_message
    if not message:
        message = f"Backend request failed with status {status}" if status else "Backend request failed"
    return BackendError(message, code=status, user_message=_body_field(response, "userMessage"))


__all__ = [
    "AuthenticationError",
    "BackendError",
    "FeatureNotEntitledError",
    "InvalidArgumentError",
    "NotFoundError",
    "SnykError",
    "UnsupportedEcosystemError",
    "VULNS_CODE",
    "VulnerabilitiesFoundSignal",
    "error_from_response",
]
