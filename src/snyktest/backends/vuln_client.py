# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dependency vulnerability backend client."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import quote

from ..errors import BackendError, InvalidArgumentError, NotFoundError, error_from_response
from ..http.client import HttpClient
from ..http.models import HttpRequest, HttpResponse
from ..http.retry import send_with_retries
from ..models.options import Severity
from ..session import SessionContext

# Manifest first, then the optional lockfiles sent alongside it.
MANIFEST_FILES: dict[str, tuple[str, ...]] = {
    "npm": ("package.json", "package-lock.json"),
    "yarn": ("package.json", "yarn.lock"),
    "pip": ("requirements.txt",),
    "maven": ("pom.xml",),
    "rubygems": ("Gemfile", "Gemfile.lock"),
}


class VulnLookup(Protocol):
    async def test_package(
        self,
        name: str,
        version: str,
        *,
        package_manager: str,
        dev: bool,
        org: str | None,
        severity_threshold: Severity | None,
    ) -> dict[str, Any]: ...

    async def test_manifest(
        self,
        path: str,
        *,
        package_manager: str,
        dev: bool,
        org: str | None,
        severity_threshold: Severity | None,
    ) -> dict[str, Any]: ...


def _query(dev: bool, org: str | None, severity_threshold: Severity | None) -> dict[str, str]:
    params = {"dev": "true" if dev else "false"}
    if org:
        params["org"] = org
    if severity_threshold is not None:
        params["severityThreshold"] = severity_threshold.value
    return params


def read_manifest_files(path: str, package_manager: str) -> dict[str, Any]:
    """Collect the manifest (and lockfile, when present) for a project path."""
    names = MANIFEST_FILES.get(package_manager)
    if not names:
        raise InvalidArgumentError(f"Unsupported package manager: {package_manager}")
    project = Path(path)
    if project.is_file():
        target_file, base = project, project.parent
    else:
        target_file, base = project / names[0], project
    if not target_file.is_file():
        raise InvalidArgumentError(f"Could not find {names[0]} in {path}")

    additional = []
    for name in names[1:]:
        candidate = base / name
        if candidate.is_file() and candidate != target_file:
            additional.append({"name": name, "contents": candidate.read_text(encoding="utf-8", errors="replace")})
    return {
        "targetFile": target_file.name,
        "files": {
            "target": {"name": target_file.name, "contents": target_file.read_text(encoding="utf-8", errors="replace")},
            "additional": additional,
        },
    }


class HttpVulnClient:
    """Talks to the `/vuln` and `/test` endpoints of the API."""

    def __init__(self, http_client: HttpClient, session: SessionContext):
        self.http_client = http_client
        self.session = session

    async def test_package(
        self,
        name: str,
        version: str,
        *,
        package_manager: str,
        dev: bool,
        org: str | None,
        severity_threshold: Severity | None,
    ) -> dict[str, Any]:
        url = f"{self.session.api_url}/vuln/{quote(package_manager, safe='')}/{quote(name, safe='')}@{quote(version, safe='')}"
        request = HttpRequest(
            url=url,
            headers=self.session.auth_headers(),
            params=_query(dev, org or self.session.org, severity_threshold),
        )
        response = await send_with_retries(self.http_client, request)
        return self._unwrap(response, not_found=NotFoundError())

    async def test_manifest(
        self,
        path: str,
        *,
        package_manager: str,
        dev: bool,
        org: str | None,
        severity_threshold: Severity | None,
    ) -> dict[str, Any]:
        payload = await asyncio.to_thread(read_manifest_files, path, package_manager)
        request = HttpRequest(
            url=f"{self.session.api_url}/test/{quote(package_manager, safe='')}",
            method="POST",
            headers=self.session.auth_headers(),
            params=_query(dev, org or self.session.org, severity_threshold),
            json_body=payload,
        )
        response = await send_with_retries(self.http_client, request)
        return self._unwrap(response)

    def _unwrap(self, response: HttpResponse, *, not_found: NotFoundError | None = None) -> dict[str, Any]:
        if not response.ok:
            raise error_from_response(response, session=self.session, not_found=not_found)
        try:
            data = response.json()
        except ValueError as exc:
            raise BackendError("Invalid response from the vulnerability service", code=response.status_code) from exc
        if not isinstance(data, dict):
            raise BackendError("Invalid response from the vulnerability service", code=response.status_code)
        return data


__all__ = ["HttpVulnClient", "MANIFEST_FILES", "VulnLookup", "read_manifest_files"]
