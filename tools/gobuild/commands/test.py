"""CLI parser for the test command."""

from __future__ import annotations

import argparse
import sys

from tools.gobuild.core.context import load_context
from tools.gobuild.core.runner import CommandRunner


def register_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser(
        "test",
        help="Runs your go tests",
    )
    parser.add_argument("--function", "-f", help="Function context for the test run")
    parser.set_defaults(func=run)


def run(args: argparse.Namespace, runner: CommandRunner) -> int:
    context = load_context(args, runner)
    outcome = context.driver.run("test")
    if not outcome.success:
        print(f"Error: {outcome.message}", file=sys.stderr)
    return outcome.exit_code
