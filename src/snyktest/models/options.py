# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Analysis options and the enums they are built from."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any

from ..errors import InvalidArgumentError


class AnalysisMode(str, Enum):
    CODE = "code"
    DEPENDENCY = "dependency"


class ShowVulnPaths(str, Enum):
    NONE = "none"
    SOME = "some"
    ALL = "all"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: Any, default: "Severity | None" = None) -> "Severity | None":
        if isinstance(value, Severity):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return default


_SEVERITY_RANK = {Severity.LOW: 1, Severity.MEDIUM: 2, Severity.HIGH: 3, Severity.CRITICAL: 4}

# camelCase spellings accepted from callers that mirror the CLI flag names.
_OPTION_ALIASES = {
    "traverseNodeModules": "traverse_node_modules",
    "showVulnPaths": "show_vuln_paths",
    "show_vulnerable_paths": "show_vuln_paths",
    "severityThreshold": "severity",
    "severity_threshold": "severity",
    "packageManager": "package_manager",
}


@dataclass(frozen=True)
class AnalysisOptions:
    """
    Options controlling mode selection and reporting for one invocation.

    Instances are immutable; use `dataclasses.replace` to derive a variant.
    """

    code: bool = False
    dev: bool = False
    path: str = ""
    traverse_node_modules: bool = False
    show_vuln_paths: ShowVulnPaths = ShowVulnPaths.SOME
    severity: Severity | None = None
    json: bool = False
    sarif: bool = False
    org: str | None = None
    package_manager: str = "npm"

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "show_vuln_paths", ShowVulnPaths(self.show_vuln_paths))
        except ValueError as exc:
            raise InvalidArgumentError(f"Invalid show-vulnerable-paths value: {self.show_vuln_paths}") from exc
        if self.severity is not None:
            severity = Severity.parse(self.severity)
            if severity is None:
                raise InvalidArgumentError(f"Invalid severity threshold: {self.severity}")
            object.__setattr__(self, "severity", severity)

    @property
    def machine_readable(self) -> bool:
        return self.json or self.sarif

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> AnalysisOptions:
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = _OPTION_ALIASES.get(key, key)
            if name in known and value is not None:
                kwargs[name] = value
        return cls(**kwargs)


__all__ = ["AnalysisMode", "AnalysisOptions", "Severity", "ShowVulnPaths"]
