# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import json
import os
from pathlib import Path

import pytest

from snyktest.session import SessionContext

FIXTURES = Path(__file__).resolve().parent / "fixtures"
API = "http://localhost:12345/api"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    for name in list(os.environ):
        if name.startswith("SNYK_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("SNYK_CONFIG_FILE", str(tmp_path / "missing-config.json"))
    # Unstubbed requests fail fast instead of sleeping between retries.
    monkeypatch.setenv("SNYK_HTTP_RETRIES", "1")


@pytest.fixture
def session():
    return SessionContext(api_token="123456789", endpoint=API, org="test-org")


@pytest.fixture
def load_fixture():
    def _load(relative):
        with (FIXTURES / relative).open(encoding="utf-8") as handle:
            return json.load(handle)

    return _load


@pytest.fixture
def read_fixture():
    def _read(relative):
        return (FIXTURES / relative).read_text(encoding="utf-8")

    return _read
