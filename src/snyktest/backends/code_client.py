# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Static code analysis backend client."""

from __future__ import annotations

import asyncio
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from ..errors import BackendError, error_from_response
from ..http.client import HttpClient
from ..http.models import HttpRequest
from ..http.retry import send_with_retries
from ..session import SessionContext

logger = logging.getLogger(__name__)

MAX_FILE_BYTES = 1024 * 1024
NODE_MODULES_DIR = "node_modules"
_SKIP_DIRS = {"__pycache__", "venv"}


class AnalysisSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class CodeClient(Protocol):
    async def analyze_folders(
        self,
        *,
        base_url: str,
        session_token: str,
        severity: AnalysisSeverity,
        paths: list[str],
        sarif: bool,
        traverse_node_modules: bool = False,
    ) -> Any: ...


def collect_source_files(paths: list[str], *, traverse_node_modules: bool = False) -> dict[str, str]:
    """
    Read the files under `paths`, keyed by path relative to each root.

    Hidden entries are never read; `node_modules` only when `traverse_node_modules` is set.
    """
    skip_dirs = _SKIP_DIRS if traverse_node_modules else _SKIP_DIRS | {NODE_MODULES_DIR}
    files: dict[str, str] = {}
    for root in paths:
        root_path = Path(root)
        if root_path.is_file():
            candidates = [root_path]
            base = root_path.parent
        else:
            candidates = []
            base = root_path
            for dirpath, dirnames, filenames in os.walk(root_path):
                dirnames[:] = sorted(d for d in dirnames if not d.startswith(".") and d not in skip_dirs)
                candidates.extend(Path(dirpath) / name for name in sorted(filenames) if not name.startswith("."))
        for candidate in candidates:
            try:
                if candidate.stat().st_size > MAX_FILE_BYTES:
                    continue
                contents = candidate.read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                logger.debug("Skipping unreadable file %s: %s", candidate, exc)
                continue
            files[candidate.relative_to(base).as_posix()] = contents
    return files


class HttpCodeClient:
    """Uploads the files under the requested paths to `<base_url>/analysis`."""

    def __init__(self, http_client: HttpClient, session: SessionContext):
        self.http_client = http_client
        self.session = session

    async def analyze_folders(
        self,
        *,
        base_url: str,
        session_token: str,
        severity: AnalysisSeverity,
        paths: list[str],
        sarif: bool,
        traverse_node_modules: bool = False,
    ) -> Any:
        files = await asyncio.to_thread(collect_source_files, paths, traverse_node_modules=traverse_node_modules)
        logger.debug("Uploading %d files for code analysis", len(files))
        request = HttpRequest(
            url=f"{base_url.rstrip('/')}/analysis",
            method="POST",
            headers={"Session-Token": session_token},
            json_body={"severity": AnalysisSeverity(severity).value, "sarif": sarif, "files": files},
        )
        response = await send_with_retries(self.http_client, request)
        if not response.ok:
            raise error_from_response(response, session=self.session)
        try:
            return response.json()
        except ValueError as exc:
            raise BackendError("Invalid response from the code analysis service", code=response.status_code) from exc


__all__ = ["AnalysisSeverity", "CodeClient", "HttpCodeClient", "collect_source_files"]
