# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Backend-agnostic findings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .options import Severity


@dataclass(frozen=True)
class NormalizedFinding:
    """
    One reported issue in a common shape.

    Dependency findings carry one entry per vulnerable path, so the same `id`
    can appear several times with different `introduced_by` chains. Code
    findings carry a `location` (file uri) with its `line` and the rule `message`.
    """

    id: str
    title: str
    severity: Severity
    location: str | None = None
    line: int | None = None
    package_name: str | None = None
    version: str | None = None
    introduced_by: tuple[str, ...] = ()
    upgrade_path: tuple[str, ...] = ()
    url: str | None = None
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "severity": self.severity.value,
        }
        if self.location is not None:
            data["location"] = self.location
        if self.line is not None:
            data["line"] = self.line
        if self.package_name is not None:
            data["packageName"] = self.package_name
        if self.version is not None:
            data["version"] = self.version
        if self.introduced_by:
            data["from"] = list(self.introduced_by)
        if self.upgrade_path:
            data["upgradePath"] = list(self.upgrade_path)
        if self.url is not None:
            data["url"] = self.url
        if self.message is not None:
            data["message"] = self.message
        return data


__all__ = ["NormalizedFinding"]
