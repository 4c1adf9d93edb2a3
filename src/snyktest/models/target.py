# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Test targets: what a single unit of a test run points at."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from enum import Enum

from ..errors import InvalidArgumentError
from .options import AnalysisOptions, Severity

_PACKAGE_SPEC_RE = re.compile(r"^(?P<name>(?:@[^/@\s]+/)?[^/@\s]+)@(?P<version>[^/@\s]+)$")


class TargetKind(str, Enum):
    PACKAGE = "package"
    PATH = "path"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class TestTarget:
    """A package specifier, a local project path, or a source directory."""

    __test__ = False  # not a pytest class

    spec: str
    kind: TargetKind
    name: str | None = None
    version: str | None = None
    dev: bool = False
    severity_threshold: Severity | None = None

    @property
    def is_package(self) -> bool:
        return self.kind == TargetKind.PACKAGE

    @classmethod
    def parse(cls, spec: str, options: AnalysisOptions | None = None, *, code: bool = False) -> TestTarget:
        options = options or AnalysisOptions()
        raw = str(spec or "").strip()
        if not raw:
            raise InvalidArgumentError("A test target must be a package specifier or a path")
        common = {"dev": options.dev, "severity_threshold": options.severity}

        if code:
            return cls(spec=raw, kind=TargetKind.DIRECTORY, **common)

        match = _PACKAGE_SPEC_RE.match(raw)
        if match and not os.path.exists(raw):
            return cls(
                spec=raw,
                kind=TargetKind.PACKAGE,
                name=match.group("name"),
                version=match.group("version"),
                **common,
            )
        return cls(spec=raw, kind=TargetKind.PATH, **common)


__all__ = ["TargetKind", "TestTarget"]
