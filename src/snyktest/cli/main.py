# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""snyktest CLI."""

from __future__ import annotations

import argparse
import asyncio
import sys

from ..config import load_http_settings
from ..http import create_default_http_client
from ..log import setup_logging
from ..models.options import Severity, ShowVulnPaths
from ..models.outcome import Failure, TerminalOutcome
from ..runtime import SnykTest
from ..session import load_session


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="snyktest", description="Test packages, projects and source code for known vulnerabilities")
    subparsers = parser.add_subparsers(dest="command", required=True)

    test = subparsers.add_parser("test", help="Test package specifiers (name@version), project paths or a source directory")
    test.add_argument("specs", nargs="*", help="Targets to test (default: current directory)")
    test.add_argument("--dev", action="store_true", help="Include development dependencies")
    test.add_argument("--code", action="store_true", help="Run static code analysis instead of a dependency test")
    test.add_argument("--json", action="store_true", help="Output JSON instead of the human-friendly report")
    test.add_argument("--sarif", action="store_true", help="Output SARIF (code analysis)")
    test.add_argument(
        "--show-vulnerable-paths",
        dest="show_vuln_paths",
        choices=[choice.value for choice in ShowVulnPaths],
        default=ShowVulnPaths.SOME.value,
        help="How many dependency paths to show per vulnerability",
    )
    test.add_argument(
        "--severity-threshold",
        dest="severity",
        choices=[severity.value for severity in Severity],
        default=None,
        help="Only report issues of this severity or higher",
    )
    test.add_argument("--org", default=None, help="Organization to run the test under")
    test.add_argument("--package-manager", default="npm", help="Package manager of dependency targets")
    test.add_argument("--ignore-ssl-errors", action="store_true", help="Skip TLS verification")
    test.add_argument("-d", "--debug", action="store_true", help="Print debug logs to stderr")
    return parser


def _print_outcome(outcome: TerminalOutcome, *, machine_readable: bool = False) -> None:
    if isinstance(outcome, Failure):
        if outcome.report is not None and (machine_readable or outcome.outcome is not None):
            sys.stdout.write(outcome.report.text.rstrip("\n") + "\n")
        if not machine_readable or outcome.report is None:
            sys.stderr.write(f"{outcome.user_message or outcome.message}\n")
        return
    sys.stdout.write(outcome.report.text.rstrip("\n") + "\n")


async def _run_test(args: argparse.Namespace) -> TerminalOutcome:
    settings = load_http_settings()
    if args.ignore_ssl_errors:
        settings.verify_ssl = False

    session = load_session(org=args.org)
    async with SnykTest(session=session, http_client=create_default_http_client(settings)) as snyk:
        return await snyk.test(
            *args.specs,
            dev=args.dev,
            code=args.code,
            json=args.json,
            sarif=args.sarif,
            show_vuln_paths=args.show_vuln_paths,
            severity=args.severity,
            org=args.org,
            package_manager=args.package_manager,
        )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging("DEBUG" if args.debug else None)

    outcome = asyncio.run(_run_test(args))
    _print_outcome(outcome, machine_readable=args.json or args.sarif)
    return outcome.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
