# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import asyncio
import json

import pytest

from snyktest.config import TestSettings
from snyktest.dependency.runner import DependencyTestRunner, normalize_vulnerabilities
from snyktest.errors import BackendError, NotFoundError, VulnerabilitiesFoundSignal
from snyktest.feature_flags import DEPENDENCY_TEST_FLAG
from snyktest.formatting.human import DEV_DEPS_TIP
from snyktest.http.adapters import StubHttpClient
from snyktest.http.models import HttpResponse
from snyktest.models.options import AnalysisOptions, Severity
from snyktest.models.outcome import Failure, Success, VulnerabilitiesFound
from snyktest.models.target import TestTarget
from snyktest.runtime import SnykTest

API = "http://localhost:12345/api"


def build_stub(load_fixture, *specs, missing=()):
    responses = load_fixture("npm/vuln-responses.json")
    stub = StubHttpClient()
    stub.add(f"{API}/cli-config/feature-flags/{DEPENDENCY_TEST_FLAG}", HttpResponse.from_json({"ok": True}))
    for spec in specs:
        stub.add(f"{API}/vuln/npm/{spec}", HttpResponse.from_json(responses[spec]))
    for spec in missing:
        stub.add(f"{API}/vuln/npm/{spec}", HttpResponse.from_json({"message": "Not found"}, status_code=404))
    return stub


async def run(session, stub, *specs, **options):
    snyk = SnykTest(session=session, http_client=stub, settings=TestSettings())
    return await snyk.test(*specs, **options)


class DelayedVulnLookup:
    def __init__(self, delays):
        self.delays = delays
        self.started = []
        self.finished = []

    async def test_package(self, name, version, **kwargs):  # noqa: ARG002
        self.started.append(name)
        await asyncio.sleep(self.delays[name])
        self.finished.append(name)
        return {"vulnerabilities": [], "dependencyCount": 1}

    async def test_manifest(self, path, **kwargs):  # pragma: no cover - not used
        raise AssertionError(path)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "specs, expected",
    [
        (("semver@4", "qs@6"), "Tested 2 projects, no vulnerable paths were found."),
        (("semver@2", "qs@6"), "Tested 2 projects, 1 contained vulnerable paths."),
        (("semver@2", "qs@1"), "Tested 2 projects, 2 contained vulnerable paths."),
        (("semver@2",), "Tested 1 dependencies for known vulnerabilities, found 1 vulnerability, 1 vulnerable path."),
    ],
)
async def test_multi_target_summary_lines(session, load_fixture, specs, expected):
    outcome = await run(session, build_stub(load_fixture, *specs), *specs)
    assert outcome.message.splitlines()[-1] == expected


@pytest.mark.asyncio
async def test_vulnerable_package_report(session, load_fixture):
    outcome = await run(session, build_stub(load_fixture, "semver@2"), "semver@2")

    assert isinstance(outcome, VulnerabilitiesFound)
    assert outcome.code == "VULNS"
    assert outcome.exit_code == 1
    assert "vulnerability found" in outcome.message
    assert outcome.message == (
        "Testing semver@2...\n"
        "\n"
        "✗ Medium severity vulnerability found in semver\n"
        "  Description: Regular Expression Denial of Service (ReDoS)\n"
        "  Info: https://snyk.io/vuln/npm:semver:20150403\n"
        "  Introduced through: semver@2.3.2\n"
        "  From: semver@2.3.2\n"
        "  Remediation: Upgrade to semver@4.3.2\n"
        "\n"
        "Organization:      test-org\n"
        "Package manager:   npm\n"
        "Open source:       yes\n"
        "Project path:      semver@2\n"
        "\n"
        "Tested 1 dependencies for known vulnerabilities, found 1 vulnerability, 1 vulnerable path."
    )

    with pytest.raises(VulnerabilitiesFoundSignal) as excinfo:
        outcome.raise_for_outcome()
    assert excinfo.value.code == "VULNS"
    assert excinfo.value.message == outcome.message


@pytest.mark.asyncio
async def test_json_output_lists_vulnerabilities(session, load_fixture):
    outcome = await run(session, build_stub(load_fixture, "semver@2"), "semver@2", json=True)

    assert isinstance(outcome, VulnerabilitiesFound)
    payload = json.loads(outcome.message)
    assert payload["vulnerabilities"][0]["id"] == "npm:semver:20150403"
    assert payload["ok"] is False
    assert payload["dependencyCount"] == 1
    assert outcome.report.payload == payload


@pytest.mark.asyncio
async def test_dev_only_project_gets_dev_tip(session, load_fixture):
    stub = build_stub(load_fixture, "lodash@4.17.11")
    outcome = await run(session, stub, "lodash@4.17.11")

    assert isinstance(outcome, Success)
    assert outcome.exit_code == 0
    assert "✓ Tested lodash@4.17.11 for known vulnerabilities, no vulnerable paths found." in outcome.message
    assert outcome.message.endswith(DEV_DEPS_TIP)
    assert outcome.raise_for_outcome() == outcome.report.text
    assert stub.requests[-1].params["dev"] == "false"


@pytest.mark.asyncio
async def test_dev_flag_suppresses_tip(session, load_fixture):
    stub = build_stub(load_fixture, "lodash@4.17.11")
    outcome = await run(session, stub, "lodash@4.17.11", dev=True)

    assert isinstance(outcome, Success)
    assert outcome.message.splitlines()[-1] == (
        "✓ Tested lodash@4.17.11 for known vulnerabilities, no vulnerable paths found."
    )
    assert DEV_DEPS_TIP not in outcome.message
    assert stub.requests[-1].params == {"dev": "true", "org": "test-org"}


@pytest.mark.asyncio
async def test_nonexistent_package_fails_with_not_found(session, load_fixture):
    outcome = await run(session, build_stub(load_fixture, missing=("nonexistent@1.0.0",)), "nonexistent@1.0.0")

    assert isinstance(outcome, Failure)
    assert outcome.exit_code == 2
    assert outcome.user_message == "Failed to get vulnerabilities. Are you sure this is a package?"
    assert outcome.code == 404
    assert outcome.message == "Failed to get vulns for package."
    with pytest.raises(NotFoundError):
        outcome.raise_for_outcome()


@pytest.mark.asyncio
async def test_partial_failure_keeps_successful_targets(session, load_fixture):
    stub = build_stub(load_fixture, "semver@2", missing=("nonexistent@1.0.0",))
    outcome = await run(session, stub, "semver@2", "nonexistent@1.0.0")

    assert isinstance(outcome, VulnerabilitiesFound)
    assert outcome.outcome.total_projects == 2
    assert outcome.outcome.results[1].error == NotFoundError()
    assert "Testing nonexistent@1.0.0...\n\nFailed to get vulnerabilities. Are you sure this is a package?" in outcome.message
    assert outcome.message.endswith("Tested 2 projects, 1 contained vulnerable paths.")


@pytest.mark.asyncio
async def test_failed_target_without_vulnerable_sibling_fails_run(session, load_fixture):
    stub = build_stub(load_fixture, "semver@4", missing=("nonexistent@1.0.0",))
    outcome = await run(session, stub, "semver@4", "nonexistent@1.0.0")

    assert isinstance(outcome, Failure)
    assert outcome.exit_code == 2
    assert outcome.error == NotFoundError()
    assert outcome.outcome.total_projects == 2
    assert outcome.outcome.results[0].error is None
    assert outcome.report.text.rstrip().endswith("Tested 2 projects, no vulnerable paths were found.")
    assert "Failed to get vulnerabilities. Are you sure this is a package?" in outcome.report.text



@pytest.mark.asyncio
async def test_all_targets_failing_returns_first_error(session, load_fixture):
    stub = build_stub(load_fixture, missing=("nonexistent@1.0.0", "missing@2.0.0"))
    outcome = await run(session, stub, "nonexistent@1.0.0", "missing@2.0.0")

    assert isinstance(outcome, Failure)
    assert outcome.error == NotFoundError()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "show, from_lines, more",
    [("none", 0, False), ("some", 3, True), ("all", 4, False)],
)
async def test_show_vulnerable_paths(session, load_fixture, show, from_lines, more):
    outcome = await run(session, build_stub(load_fixture, "express@4.0.0"), "express@4.0.0", show_vuln_paths=show)
    lines = outcome.message.splitlines()

    debug_block = lines[lines.index("✗ Low severity vulnerability found in debug") :]
    debug_block = debug_block[: debug_block.index("")]
    assert sum(1 for line in debug_block if line.startswith("  From: ")) == from_lines
    assert ("  and 1 more..." in debug_block) is more
    assert "  Introduced through: debug@0.8.1, send@0.2.0, serve-static@1.0.1, finalhandler@0.0.1" in debug_block
    assert "  Remediation: Upgrade to express@4.0.0" in debug_block
    assert lines[-1] == "Tested 27 dependencies for known vulnerabilities, found 2 vulnerabilities, 5 vulnerable paths."


@pytest.mark.asyncio
async def test_severity_threshold_filters_findings(session, load_fixture):
    stub = build_stub(load_fixture, "express@4.0.0")
    outcome = await run(session, stub, "express@4.0.0", severity_threshold="high")

    findings = outcome.outcome.results[0].findings
    assert [finding.id for finding in findings] == ["npm:fresh:20170908"]
    assert stub.requests[-1].params["severityThreshold"] == "high"


@pytest.mark.asyncio
async def test_project_path_posts_manifest(session, tmp_path):
    (tmp_path / "package.json").write_text('{"name": "demo", "dependencies": {"qs": "6.0.0"}}')
    (tmp_path / "package-lock.json").write_text("{}")
    stub = StubHttpClient()
    stub.add(f"{API}/cli-config/feature-flags/{DEPENDENCY_TEST_FLAG}", HttpResponse.from_json({"ok": True}))
    stub.add(f"{API}/test/npm", HttpResponse.from_json({"vulnerabilities": [], "dependencyCount": 3}), method="POST")

    outcome = await run(session, stub, str(tmp_path))

    assert isinstance(outcome, Success)
    assert outcome.message.splitlines()[-1] == "✓ Tested 3 dependencies for known vulnerabilities, no vulnerable paths found."
    assert "Open source:       no" in outcome.message
    body = stub.requests[-1].json_body
    assert body["targetFile"] == "package.json"
    assert body["files"]["additional"] == [{"name": "package-lock.json", "contents": "{}"}]


@pytest.mark.asyncio
async def test_results_keep_input_order_regardless_of_completion(session):
    lookup = DelayedVulnLookup({"qs": 0.05, "semver": 0.0})
    runner = DependencyTestRunner(lookup, session, TestSettings(concurrency=3))
    options = AnalysisOptions()
    targets = [TestTarget.parse(spec, options) for spec in ("qs@6", "semver@2")]

    outcome = await runner.test_many(targets, options)

    assert [result.target.spec for result in outcome.results] == ["qs@6", "semver@2"]
    assert lookup.started == ["qs", "semver"]
    assert lookup.finished == ["semver", "qs"]


def test_normalize_vulnerabilities_defaults_and_threshold():
    payload = {
        "vulnerabilities": [
            {"id": "SNYK-1", "severity": "critical", "upgradePath": [False, "a@2"]},
            {"id": "SNYK-2", "severity": "low"},
            "not-a-dict",
        ]
    }
    findings = normalize_vulnerabilities(payload)
    assert [finding.id for finding in findings] == ["SNYK-1", "SNYK-2"]
    assert findings[0].upgrade_path == ("a@2",)
    assert findings[0].url == "https://snyk.io/vuln/SNYK-1"
    assert findings[1].title == "SNYK-2"

    assert [finding.id for finding in normalize_vulnerabilities(payload, Severity.HIGH)] == ["SNYK-1"]


def test_normalize_vulnerabilities_ignores_non_list_paths():
    payload = {
        "vulnerabilities": [
            {"id": "SNYK-3", "severity": "high", "from": "weird@1.0.0", "upgradePath": True},
            {"id": "SNYK-4", "severity": "medium", "from": None, "upgradePath": {"a": 1}},
        ]
    }
    findings = normalize_vulnerabilities(payload)

    assert [finding.introduced_by for finding in findings] == [(), ()]
    assert [finding.upgrade_path for finding in findings] == [(), ()]


@pytest.mark.asyncio
async def test_malformed_vulnerability_does_not_abort_siblings(session, load_fixture):
    stub = build_stub(load_fixture, "semver@4")
    weird = {
        "vulnerabilities": [{"id": "SNYK-WEIRD", "severity": "low", "from": 7, "upgradePath": True}],
        "dependencyCount": 1,
    }
    stub.add(f"{API}/vuln/npm/weird@1.0.0", HttpResponse.from_json(weird))

    outcome = await run(session, stub, "semver@4", "weird@1.0.0")

    assert isinstance(outcome, VulnerabilitiesFound)
    assert [result.target.spec for result in outcome.outcome.results] == ["semver@4", "weird@1.0.0"]
    assert outcome.outcome.results[1].findings[0].upgrade_path == ()


class ExplodingVulnLookup:
    async def test_package(self, name, version, **kwargs):  # noqa: ARG002
        if name == "boom":
            raise TypeError("'bool' object is not iterable")
        return {"vulnerabilities": [], "dependencyCount": 2}

    async def test_manifest(self, path, **kwargs):  # pragma: no cover - not used
        raise AssertionError(path)


@pytest.mark.asyncio
async def test_unexpected_error_stays_with_its_target(session):
    runner = DependencyTestRunner(ExplodingVulnLookup(), session, TestSettings())
    options = AnalysisOptions()
    targets = [TestTarget.parse(spec, options) for spec in ("semver@4", "boom@1.0.0")]

    outcome = await runner.test_many(targets, options)

    assert outcome.results[0].error is None
    error = outcome.results[1].error
    assert isinstance(error, BackendError)
    assert error.message == "'bool' object is not iterable"
    assert isinstance(error.__cause__, TypeError)
