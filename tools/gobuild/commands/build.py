"""CLI parser for the build command."""

from __future__ import annotations

import argparse

from tools.gobuild.core import logging as console
from tools.gobuild.core.context import load_context
from tools.gobuild.core.runner import CommandRunner


def register_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser(
        "build",
        help="Builds your go files needed for deployment",
    )
    parser.add_argument("--function", "-f", help="Build only this function")
    parser.add_argument(
        "--local",
        "-l",
        action="store_true",
        help="Build for the local machine (skips the awsbuildPrefix cross-compile prefix)",
    )
    parser.set_defaults(func=run)


def run(args: argparse.Namespace, runner: CommandRunner) -> int:
    context = load_context(args, runner)
    results = context.driver.run("build")
    console.success(f"Built {len(results or [])} Go function(s)")
    return 0
