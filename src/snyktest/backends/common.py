# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Helpers shared by backend clients."""

from __future__ import annotations

from typing import Any

from ..http.models import HttpResponse


def json_body(response: HttpResponse) -> dict[str, Any]:
    """Return the response body as a dict, or an empty dict when it is not a JSON object."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


__all__ = ["json_body"]
