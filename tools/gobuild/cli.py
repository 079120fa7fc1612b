#!/usr/bin/env python3
"""go-build CLI: generate Go entrypoints, build binaries, run tests, rewrite handlers."""

from __future__ import annotations

import argparse
import logging
import sys

from tools.gobuild.commands import build, package, test
from tools.gobuild.core.errors import GoBuildError
from tools.gobuild.core.runner import CommandRunner, RunnerError

PROG = "gobuild"


def hint_run(*parts: str) -> str:
    return f"Hint: run `{' '.join((PROG, *parts))}`."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Build Go functions declared in serverless.yml",
    )
    parser.add_argument(
        "--config",
        "-c",
        default="serverless.yml",
        help="Path to serverless.yml (or its directory)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print commands without executing side effects",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", required=True)
    build.register_parser(subparsers)
    test.register_parser(subparsers)
    package.register_parser(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    runner = CommandRunner(dry_run=bool(args.dry_run))

    try:
        return int(args.func(args, runner))
    except (GoBuildError, RunnerError, ValueError, FileNotFoundError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        print(hint_run(args.command, "--help"), file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
